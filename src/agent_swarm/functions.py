"""Agent functions (tools) and the per-agent tool registry."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

from .errors import SchemaGenerationError
from .models import ContextVariables, Result, ToolDef
from .schema import Executor, compile_executor, compile_parameters, infer_args_model

logger = logging.getLogger(__name__)


class AgentFunction:
    """A registered, schema-described, type-erased callable exposed to the model.

    Build instances with :func:`new_agent_function` or :func:`agent_function`;
    the dispatcher only ever sees :meth:`execute`.
    """

    def __init__(
        self,
        name: str,
        description: str,
        parameters: dict[str, Any],
        executor: Executor,
    ) -> None:
        self._name = name
        self._description = description
        self._parameters = parameters
        self._executor = executor

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for parameters."""
        return self._parameters

    async def execute(self, args: dict[str, Any], context_variables: ContextVariables) -> Result:
        return await self._executor(args, context_variables)

    def to_def(self) -> ToolDef:
        return ToolDef(name=self.name, description=self.description, parameters=self.parameters)

    def to_tool_schema(self) -> dict[str, Any]:
        """Standard function-calling schema for any LLM provider."""
        return self.to_def().to_tool_schema()

    def __repr__(self) -> str:
        return f"AgentFunction(name={self._name!r})"


def function_to_definition(function: AgentFunction) -> ToolDef:
    """Definition of ``function`` as presented to the model."""
    return function.to_def()


def new_agent_function(
    name: str,
    description: str,
    executor: Callable[..., Any],
    args_model: Any = None,
) -> AgentFunction:
    """Compile ``executor(args, context_variables)`` into an AgentFunction.

    ``args_model`` defaults to the annotation of the executor's first
    parameter. Raises SchemaGenerationError if the shape cannot be compiled.
    """
    try:
        shape = args_model if args_model is not None else infer_args_model(executor)
        parameters = compile_parameters(shape)
        compiled = compile_executor(shape, executor)
    except (TypeError, ValueError, NameError) as exc:
        raise SchemaGenerationError(name, str(exc), exc) from exc
    logger.debug("Compiled tool %s with parameters %s", name, sorted(parameters.get("properties", {})))
    return AgentFunction(name=name, description=description, parameters=parameters, executor=compiled)


def agent_function(
    name: str | None = None,
    description: str | None = None,
    args_model: Any = None,
) -> Callable[[Callable[..., Any]], AgentFunction]:
    """Decorator form of :func:`new_agent_function`.

    The tool name defaults to the function name and the description to its
    docstring.
    """

    def decorate(fn: Callable[..., Any]) -> AgentFunction:
        return new_agent_function(
            name or fn.__name__,
            description if description is not None else (fn.__doc__ or "").strip(),
            fn,
            args_model=args_model,
        )

    return decorate


class ToolRegistry:
    """Immutable ordered collection of an agent's functions.

    Registering never mutates; it returns a new registry. When two functions
    share a name the later registration wins, both for resolution and for the
    definition shown to the model, which keeps the position of the first.
    """

    __slots__ = ("_functions",)

    def __init__(self, functions: tuple[AgentFunction, ...] = ()) -> None:
        self._functions = tuple(functions)

    def register(self, *functions: AgentFunction) -> ToolRegistry:
        return ToolRegistry(self._functions + tuple(functions))

    def resolve(self, name: str) -> AgentFunction | None:
        for function in reversed(self._functions):
            if function.name == name:
                return function
        return None

    def names(self) -> list[str]:
        return list(dict.fromkeys(f.name for f in self._functions))

    def definitions(self) -> list[ToolDef]:
        out: list[ToolDef] = []
        for name in self.names():
            function = self.resolve(name)
            if function is not None:
                out.append(function_to_definition(function))
        return out

    def tool_schemas(self) -> list[dict[str, Any]]:
        return [d.to_tool_schema() for d in self.definitions()]

    def __iter__(self) -> Iterator[AgentFunction]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def __repr__(self) -> str:
        return f"ToolRegistry({self.names()!r})"
