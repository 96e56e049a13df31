"""
Step registry for JSON scripts.

A step name maps to one RegisteredAction: the function run against a
ScriptRuntime, the pydantic model its `args` must satisfy, and the first
line of the function's docstring, which `browser-qa doctor` lists.
Steps registered without a model accept no args at all.
"""
# @file purpose: Register scripted steps and validate ActionSpec args.

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple, Type

from pydantic import BaseModel, ConfigDict

from .action import ActionSpec

# fn(runtime, params) -> ActionResult
ActionFn = Callable[..., Any]


class NoArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")


@dataclass(frozen=True)
class RegisteredAction:
    name: str
    fn: ActionFn
    params_model: Type[BaseModel]
    summary: str

    def parse(self, args: dict[str, Any]) -> BaseModel:
        return self.params_model.model_validate(args)


_ACTIONS: Dict[str, RegisteredAction] = {}


def action(
    name: str, *, params_model: Type[BaseModel] = NoArgs
) -> Callable[[ActionFn], ActionFn]:
    """
    Register a step:
        @action("click", params_model=ClickParams)
        def click(rt, params): ...
    """

    def deco(fn: ActionFn) -> ActionFn:
        doc = inspect.getdoc(fn) or ""
        summary = doc.splitlines()[0] if doc else ""
        _ACTIONS[name] = RegisteredAction(name, fn, params_model, summary)
        return fn

    return deco


def get(name: str) -> RegisteredAction:
    try:
        return _ACTIONS[name]
    except KeyError as e:
        raise KeyError(f"Action not registered: {name}") from e


def registered() -> list[RegisteredAction]:
    return [_ACTIONS[n] for n in sorted(_ACTIONS)]


def validate_spec(spec: ActionSpec) -> Tuple[RegisteredAction, BaseModel]:
    """
    Resolve the step and parse its args. Raises KeyError for an unknown
    name and pydantic.ValidationError for bad args.
    """
    entry = get(spec.name)
    return entry, entry.parse(spec.args)


def snapshot() -> Dict[str, RegisteredAction]:
    return dict(_ACTIONS)


def restore(saved: Dict[str, RegisteredAction]) -> None:
    _ACTIONS.clear()
    _ACTIONS.update(saved)
