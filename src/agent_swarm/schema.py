"""Schema compiler: typed argument shapes to JSON Schema and uniform executors.

A tool's arguments are described by a pydantic model (or ``dict`` for an
untyped map). Compilation produces two things:

- a parameter schema a calling model understands (``type: object``,
  ``properties``, ``required``, ``additionalProperties: false``), with nested
  models inlined and pydantic metadata such as ``title`` or ``$defs`` removed;
- an executor with the fixed signature ``(args, context_variables) -> Result``
  that round-trips the generic argument map through JSON into the typed shape
  before calling the user function.

Only fields declared with :func:`required_field` are listed as required.
Any other field the model leaves out takes its default or, when it has none,
the zero value of its type (0, "", False, empty collection, None) before
validation.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import json
import types
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any, Literal, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from .models import ContextVariables, Result

REQUIRED_MARKER = "x-agent-swarm-required"

Executor = Callable[[dict[str, Any], ContextVariables], Awaitable[Result]]


def required_field(description: str | None = None, **kwargs: Any) -> Any:
    """Declare a field the model must always supply.

    The field is listed in the schema's ``required`` array and carries
    ``description`` when given.
    """
    extra = dict(kwargs.pop("json_schema_extra", None) or {})
    extra[REQUIRED_MARKER] = True
    return Field(..., description=description, json_schema_extra=extra, **kwargs)


def is_untyped_map(args_model: Any) -> bool:
    return args_model is dict or get_origin(args_model) is dict


def _is_model(args_model: Any) -> bool:
    return isinstance(args_model, type) and issubclass(args_model, BaseModel)


# ---------------------------------------------------------------------------
# Parameter schema
# ---------------------------------------------------------------------------


def _resolve_ref(ref: str, defs: dict[str, Any], seen: tuple[str, ...]) -> tuple[dict[str, Any], tuple[str, ...]]:
    name = ref.rsplit("/", 1)[-1]
    if name in seen:
        raise ValueError(f"recursive model {name} cannot be inlined")
    target = defs.get(name)
    if target is None:
        raise ValueError(f"unresolvable reference {ref}")
    return target, seen + (name,)


def _clean(node: Any, defs: dict[str, Any], seen: tuple[str, ...] = ()) -> Any:
    if isinstance(node, list):
        return [_clean(item, defs, seen) for item in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if isinstance(ref, str):
        target, seen = _resolve_ref(ref, defs, seen)
        node = {**target, **{k: v for k, v in node.items() if k != "$ref"}}

    out: dict[str, Any] = {}
    for key, value in node.items():
        if key.startswith("$") or key == "title":
            continue
        if key == "properties" and isinstance(value, dict):
            out[key] = {name: _clean(prop, defs, seen) for name, prop in value.items()}
        else:
            out[key] = _clean(value, defs, seen)

    if out.get("type") == "object" and "properties" in out:
        required = [
            name
            for name, prop in out["properties"].items()
            if isinstance(prop, dict) and prop.pop(REQUIRED_MARKER, False)
        ]
        out.pop("required", None)
        if required:
            out["required"] = required
        out["additionalProperties"] = False
    return out


@lru_cache(maxsize=None)
def _compile_model_schema(args_model: type[BaseModel]) -> dict[str, Any]:
    raw = args_model.model_json_schema(mode="validation")
    return _clean(raw, raw.get("$defs", {}))


def compile_parameters(args_model: Any) -> dict[str, Any]:
    """Return the parameter schema for ``args_model``.

    Raises TypeError for shapes that are neither a pydantic model nor a dict,
    and ValueError when the model cannot be inlined (recursive references).
    """
    if is_untyped_map(args_model):
        return {"type": "object", "properties": {}, "additionalProperties": False}
    if not _is_model(args_model):
        raise TypeError(f"unsupported argument shape {args_model!r}; use a pydantic model or dict")
    return copy.deepcopy(_compile_model_schema(args_model))


# ---------------------------------------------------------------------------
# Executor adapter
# ---------------------------------------------------------------------------


def infer_args_model(fn: Callable[..., Any]) -> Any:
    """Argument shape from the annotation of ``fn``'s first parameter (``dict`` if absent)."""
    params = list(inspect.signature(fn).parameters.values())
    if not params:
        raise TypeError(f"{getattr(fn, '__name__', fn)!r} must accept (args, context_variables)")
    hints = get_type_hints(fn)
    return hints.get(params[0].name, dict)


def _to_result(value: Any) -> Result:
    from .agent import Agent

    if isinstance(value, Result):
        return value
    if isinstance(value, Agent):
        return Result(success=True, data=value.name, agent=value)
    return Result(success=True, data=value)


_ZERO_KINDS: tuple[tuple[type, Any], ...] = (
    (bool, False),
    (str, ""),
    (int, 0),
    (float, 0.0),
    (list, []),
    (tuple, []),
    (set, []),
    (frozenset, []),
    (dict, {}),
)


def _zero_value(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = get_args(annotation)
        if type(None) in members:
            return None
        return _zero_value(members[0])
    if origin is Literal:
        return get_args(annotation)[0]
    target = origin or annotation
    if _is_model(target):
        return fill_zero_values(target, {})
    if isinstance(target, type):
        for kind, zero in _ZERO_KINDS:
            if issubclass(target, kind):
                return copy.copy(zero)
    return None


def fill_zero_values(args_model: type[BaseModel], args: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``args`` with omitted unmarked, default-less fields set to their zero value.

    Nested models supplied as objects are filled the same way. Fields declared
    with :func:`required_field` are left for validation to reject.
    """
    filled = dict(args)
    for name, info in args_model.model_fields.items():
        key = info.alias or name
        annotation = info.annotation
        if key in filled:
            value = filled[key]
            if isinstance(value, dict) and _is_model(annotation):
                filled[key] = fill_zero_values(annotation, value)
            continue
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        if info.is_required() and not extra.get(REQUIRED_MARKER):
            filled[key] = _zero_value(annotation)
    return filled


def compile_executor(args_model: Any, fn: Callable[..., Any]) -> Executor:
    """Wrap a typed ``fn(args, context_variables)`` into the uniform executor.

    Sync functions run in a worker thread so concurrent dispatch never blocks
    the event loop. Exceptions raised by ``fn`` itself propagate to the caller.
    """
    adapter: TypeAdapter[Any] = TypeAdapter(args_model)
    is_async = inspect.iscoroutinefunction(fn)
    fills_zeros = _is_model(args_model)

    async def executor(args: dict[str, Any], context_variables: ContextVariables) -> Result:
        try:
            payload = json.dumps(args)
        except (TypeError, ValueError) as exc:
            return Result(success=False, error=f"error marshaling arguments: {exc}")
        if fills_zeros and isinstance(args, dict):
            payload = json.dumps(fill_zero_values(args_model, args))
        try:
            typed_args = adapter.validate_json(payload)
        except ValidationError as exc:
            return Result(success=False, error=f"error unmarshaling arguments: {exc}")

        if is_async:
            value = await fn(typed_args, context_variables)
        else:
            value = await asyncio.to_thread(fn, typed_args, context_variables)
        return _to_result(value)

    return executor
