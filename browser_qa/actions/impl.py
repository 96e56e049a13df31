"""
Core action implementations bound to the page gateway:
- open_url / wait_for / click / click_js / type / select_option
- extract_text / exists
- prepare_download / await_download
- snapshot

Each action:
  1) Expects a ScriptRuntime + validated params (Pydantic v2)
  2) Returns ActionResult, or raises ActionExecutionError on failure
"""

# @file purpose: Implement and register core actions.
from __future__ import annotations

from browser_qa.core.errors import ActionExecutionError, BrowserQAError
from browser_qa.core.page import SelectBy
from browser_qa.core.registry import NoArgs, action
from browser_qa.core.result import ActionResult
from browser_qa.core.wait import Readiness

from .params import (
    AwaitDownloadParams,
    ClickJsParams,
    ClickParams,
    ExistsParams,
    ExtractTextParams,
    OpenUrlParams,
    SelectOptionParams,
    SnapshotParams,
    TypeParams,
    WaitForParams,
)
from .runtime import ScriptRuntime


@action("open_url", params_model=OpenUrlParams)
def open_url(rt: ScriptRuntime, params: OpenUrlParams) -> ActionResult:
    """Navigate the browser to `url`."""
    try:
        rt.page.navigate(str(params.url))
        return ActionResult.success(step="open_url", url=str(params.url))
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="open_url",
            message="failed to open url",
            url=str(params.url),
            cause=e,
        ) from e


@action("wait_for", params_model=WaitForParams)
def wait_for(rt: ScriptRuntime, params: WaitForParams) -> ActionResult:
    """Wait until the element reaches the requested readiness."""
    readiness = Readiness(params.readiness)
    try:
        rt.page_with_timeout(params.timeout_s).await_ready(params.locator, readiness)
        return ActionResult.success(
            step="wait_for", selector=str(params.locator), readiness=readiness.value
        )
    except BrowserQAError as e:
        raise ActionExecutionError(
            action="wait_for",
            message=f"element did not become {readiness.value} in time",
            selector=str(params.locator),
            cause=e,
        ) from e


@action("click", params_model=ClickParams)
def click(rt: ScriptRuntime, params: ClickParams) -> ActionResult:
    """Click once the element is clickable."""
    try:
        rt.page.click(params.locator)
        return ActionResult.success(step="click", selector=str(params.locator))
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="click",
            message="failed to click element",
            selector=str(params.locator),
            cause=e,
        ) from e


@action("click_js", params_model=ClickJsParams)
def click_js(rt: ScriptRuntime, params: ClickJsParams) -> ActionResult:
    """Click through script, without waiting for clickability."""
    try:
        rt.page.click_via_script(params.locator)
        return ActionResult.success(step="click_js", selector=str(params.locator))
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="click_js",
            message="failed to click element via script",
            selector=str(params.locator),
            cause=e,
        ) from e


@action("type", params_model=TypeParams)
def type_action(rt: ScriptRuntime, params: TypeParams) -> ActionResult:
    """
    Clear the field and type text into it.
    Named type_action to avoid shadowing Python's built-in `type`.
    """
    try:
        rt.page.type_text(params.locator, params.text)
        return ActionResult.success(
            step="type", selector=str(params.locator), length=len(params.text)
        )
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="type",
            message="failed to input text",
            selector=str(params.locator),
            cause=e,
        ) from e


@action("select_option", params_model=SelectOptionParams)
def select_option_action(rt: ScriptRuntime, params: SelectOptionParams) -> ActionResult:
    """Choose an option of a <select> by visible text, value or index."""
    try:
        rt.page.select_option(params.locator, SelectBy(params.by), params.key)
        return ActionResult.success(
            step="select_option", selector=str(params.locator), by=params.by, key=params.key
        )
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="select_option",
            message="failed to select option",
            selector=str(params.locator),
            details={"by": params.by, "key": params.key},
            cause=e,
        ) from e


@action("extract_text", params_model=ExtractTextParams)
def extract_text(rt: ScriptRuntime, params: ExtractTextParams) -> ActionResult:
    """Read the rendered text of a visible element."""
    try:
        txt = rt.page.read_text(params.locator)
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="extract_text",
            message="failed to extract text",
            selector=str(params.locator),
            cause=e,
        ) from e
    return ActionResult(
        ok=True,
        extracted_content=txt,
        meta={"step": "extract_text", "selector": str(params.locator), "empty": not txt},
    )


@action("exists", params_model=ExistsParams)
def exists_action(rt: ScriptRuntime, params: ExistsParams) -> ActionResult:
    """Check presence without waiting."""
    try:
        found = rt.page.exists(params.locator)
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="exists",
            message="presence check failed",
            selector=str(params.locator),
            cause=e,
        ) from e
    if params.expect is not None and found != params.expect:
        raise ActionExecutionError(
            action="exists",
            message=f"expected exists={params.expect}, got {found}",
            selector=str(params.locator),
        )
    return ActionResult(
        ok=True,
        extracted_content=str(found).lower(),
        meta={"step": "exists", "selector": str(params.locator), "found": found},
    )


@action("prepare_download")
def prepare_download(rt: ScriptRuntime, params: NoArgs) -> ActionResult:
    """Empty the download destination before triggering a download."""
    detector = rt.downloads
    try:
        detector.prepare()
    except BrowserQAError as e:
        raise ActionExecutionError(
            action="prepare_download",
            message="failed to prepare download directory",
            details={"dir": str(detector.download_dir)},
            cause=e,
        ) from e
    return ActionResult.success(
        step="prepare_download",
        dir=str(detector.download_dir),
        topology=detector.topology.value,
    )


@action("await_download", params_model=AwaitDownloadParams)
def await_download(rt: ScriptRuntime, params: AwaitDownloadParams) -> ActionResult:
    """Wait for a downloaded file to become complete and stable."""
    try:
        done = rt.downloads.await_completion(
            expected_name=params.expected_name, pattern=params.pattern
        )
    except BrowserQAError as e:
        raise ActionExecutionError(
            action="await_download",
            message="download did not complete",
            details={"expected_name": params.expected_name, "pattern": params.pattern},
            cause=e,
        ) from e
    rt.session.log_step(f"[DOWNLOAD] {done.name} ({done.size} bytes)")
    return ActionResult(
        ok=True,
        extracted_content=str(done.path),
        meta={"step": "await_download", "path": str(done.path), "size": done.size},
    )


@action("snapshot", params_model=SnapshotParams)
def snapshot_action(rt: ScriptRuntime, params: SnapshotParams) -> ActionResult:
    """Attach a PNG of the current page to the run's evidence."""
    try:
        data = rt.session.driver.screenshot_png()
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="snapshot",
            message="failed to take screenshot",
            details={"name": params.name},
            cause=e,
        ) from e
    if rt.session.recorder is not None:
        rt.session.recorder.attach(params.name, data, "image/png")
    return ActionResult.success(step="snapshot", name=params.name, size=len(data))
