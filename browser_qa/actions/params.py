"""
Parameter models for scripted actions (Pydantic v2).
Validated at the script -> runner boundary so bad steps fail before the
browser is touched.

Locators accept the compact string form ("name=userName", "xpath=//h1",
"#q") or an object {"by": "name", "value": "userName"}.
"""
# @file purpose: Define parameter schemas for scripted actions using Pydantic v2.

from typing import Annotated, Any, Literal, Optional

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    BeforeValidator,
    Field,
    StringConstraints,
    model_validator,
)

from browser_qa.core.locator import Locator


def _to_locator(value: Any) -> Any:
    if isinstance(value, str):
        return Locator.parse(value)
    return value


LocatorField = Annotated[Locator, BeforeValidator(_to_locator)]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
TimeoutSeconds = Annotated[float, Field(gt=0, le=600)]
TextLimited = Annotated[str, Field(max_length=4000)]


class OpenUrlParams(BaseModel):
    url: AnyHttpUrl


class WaitForParams(BaseModel):
    locator: LocatorField
    readiness: Literal["present", "visible", "clickable"] = "visible"
    timeout_s: Optional[TimeoutSeconds] = None


class ClickParams(BaseModel):
    locator: LocatorField


class ClickJsParams(BaseModel):
    """Script click, for elements hidden behind overlays."""

    locator: LocatorField


class TypeParams(BaseModel):
    locator: LocatorField
    text: TextLimited


class SelectOptionParams(BaseModel):
    locator: LocatorField
    by: Literal["visible_text", "value", "index"] = "visible_text"
    key: str | int

    @model_validator(mode="after")
    def _index_is_int(self) -> "SelectOptionParams":
        if self.by == "index":
            try:
                self.key = int(self.key)
            except ValueError as e:
                raise ValueError("key must be an integer when by='index'") from e
        return self


class ExtractTextParams(BaseModel):
    locator: LocatorField


class ExistsParams(BaseModel):
    """Non-waiting presence check; `expect` turns it into an assertion."""

    locator: LocatorField
    expect: Optional[bool] = None


class AwaitDownloadParams(BaseModel):
    expected_name: Optional[NonEmptyStr] = None
    pattern: Optional[NonEmptyStr] = Field(default=None, description="Glob, e.g. *.pdf")


class SnapshotParams(BaseModel):
    name: NonEmptyStr = "snapshot.png"
