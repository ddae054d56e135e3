# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

# shapeguard/contracts.py

import functools
import inspect
import logging
import time
from typing import Any, Callable, List, Optional, Sequence, Tuple

import anyio

from .config import ErrorOption, get_config
from .exceptions import ConfigurationError, ImplementationError, ValidationError
from .schema.builders import any_
from .schema.nodes import Kind, SchemaNode, as_node
from .telemetry import get_tracer, record_contract_metrics
from .validation.base import MISSING, Issue, IssueCode
from .validation.engine import make_issue, walk
from .validation.resolution import coerce_error_option

logger = logging.getLogger(__name__)


def _qualified_name(fn: Callable) -> str:
    return f"{getattr(fn, '__module__', None) or '<unknown>'}.{getattr(fn, '__qualname__', repr(fn))}"


def _discard(awaitable: Any) -> None:
    close = getattr(awaitable, "close", None)
    if callable(close):
        close()


class FunctionSchema:
    """
    A typed contract for an ordinary callable.

    Arguments are validated against ``input`` before the implementation runs;
    the return value is validated against ``output`` afterwards. Arguments
    that fail raise ``ValidationError`` (one issue per bad position, or a
    single ``arity_mismatch`` issue when the count is wrong) and the
    implementation is never invoked.

    .. code-block:: python

        from shapeguard import boolean, function_schema, number, string

        longer_than = function_schema(input=[string(), number()], output=boolean())

        @longer_than.implement
        def check(text, limit):
            return len(text) > limit

        check("hi", 1)    # True
        check(1, "hi")    # ValidationError with issues at (0,) and (1,)

        @longer_than.implement_async
        async def check_later(text, limit):
            return len(text) > limit

        await check_later("hi", 1)

    The wrapper returned by ``implement_async`` validates arguments as soon as
    it is called, before any asynchronous work begins, and returns an
    awaitable for the rest of the call.
    """

    def __init__(self, node: SchemaNode):
        if node.kind is not Kind.FUNCTION:
            raise ConfigurationError(f"FunctionSchema needs a function node, got {node.kind.value}")
        self.node = node

    @property
    def input(self) -> Tuple[SchemaNode, ...]:
        return self.node.inputs

    @property
    def output(self) -> SchemaNode:
        return self.node.output

    def __repr__(self) -> str:
        return f"FunctionSchema(inputs={len(self.node.inputs)}, variadic={self.node.rest is not None})"

    # ------------------------------------------------------------------
    # Shared phases
    # ------------------------------------------------------------------

    def _arity_bounds(self) -> Tuple[int, Optional[int]]:
        inputs = self.node.inputs
        minimum = len(inputs)
        while minimum and inputs[minimum - 1].accepts_missing:
            minimum -= 1
        maximum = None if self.node.rest is not None else len(inputs)
        return minimum, maximum

    def _parse_arguments(self, args: Tuple[Any, ...]) -> Tuple[List[Any], List[Issue]]:
        node = self.node
        minimum, maximum = self._arity_bounds()
        if len(args) < minimum or (maximum is not None and len(args) > maximum):
            return [], [
                make_issue(
                    node,
                    IssueCode.ARITY_MISMATCH,
                    (),
                    args,
                    minimum=minimum,
                    maximum=maximum,
                    received=len(args),
                )
            ]

        parsed: List[Any] = []
        issues: List[Issue] = []
        for index, schema in enumerate(node.inputs):
            raw = args[index] if index < len(args) else MISSING
            value, arg_issues = walk(schema, raw, (index,))
            issues.extend(arg_issues)
            if value is MISSING:
                # omitted trailing argument: let the implementation's own default apply
                break
            parsed.append(value)
        for index in range(len(node.inputs), len(args)):
            value, arg_issues = walk(node.rest, args[index], (index,))
            issues.extend(arg_issues)
            parsed.append(value)
        return parsed, issues

    def _check_arguments(self, name: str, args: Tuple[Any, ...], started: float) -> List[Any]:
        parsed, issues = self._parse_arguments(args)
        if issues:
            record_contract_metrics(name, "invalid_input", started)
            logger.debug("Arguments rejected for '%s': %s", name, [issue.code for issue in issues])
            raise ValidationError(issues, context=f"Invalid arguments for '{name}'")
        return parsed

    def _check_result(self, name: str, result: Any, started: float) -> Any:
        value, issues = walk(self.node.output, result, ())
        if issues:
            record_contract_metrics(name, "invalid_output", started)
            raise ValidationError(issues, context=f"Invalid return value from '{name}'")
        record_contract_metrics(name, "success", started)
        return value

    def _implementation_failed(self, name: str, parsed: List[Any], exc: Exception, started: float) -> ImplementationError:
        record_contract_metrics(name, "error", started)
        issue = make_issue(
            self.node,
            IssueCode.IMPLEMENTATION_ERROR,
            (),
            tuple(parsed),
            error=f"{type(exc).__name__}: {exc}",
        )
        return ImplementationError(name, exc, issue=issue)

    # ------------------------------------------------------------------
    # Wrappers
    # ------------------------------------------------------------------

    def implement(self, fn: Callable) -> Callable:
        """Wrap a synchronous implementation."""

        if not callable(fn):
            raise ConfigurationError("implement() expects a callable")
        if inspect.iscoroutinefunction(fn):
            raise ConfigurationError(
                f"'{_qualified_name(fn)}' is a coroutine function; use implement_async()"
            )
        name = _qualified_name(fn)

        @functools.wraps(fn)
        def sync_wrapper(*args):
            """Validate arguments, run the implementation, validate its result."""
            started = time.perf_counter()
            with get_tracer().start_as_current_span(
                f"shapeguard.contract:{name}",
                attributes={"shapeguard.function": name, "shapeguard.async": False},
            ):
                parsed = self._check_arguments(name, args, started)
                try:
                    result = fn(*parsed)
                except Exception as exc:
                    raise self._implementation_failed(name, parsed, exc, started) from exc

                if inspect.isawaitable(result):
                    _discard(result)
                    record_contract_metrics(name, "error", started)
                    raise ConfigurationError(
                        f"'{name}' returned an awaitable from a synchronous contract; use implement_async()"
                    )
                return self._check_result(name, result, started)

        sync_wrapper.__shapeguard_contract__ = self
        return sync_wrapper

    def implement_async(self, fn: Callable, *, offload: Optional[bool] = None) -> Callable:
        """Wrap an asynchronous implementation.

        :param fn: A coroutine function, or a plain callable (optionally
                   returning an awaitable).
        :param offload: Run a plain callable in a worker thread so it does not
                        block the event loop. Defaults to the global
                        ``offload_sync_implementations`` option.
        """

        if not callable(fn):
            raise ConfigurationError("implement_async() expects a callable")
        name = _qualified_name(fn)
        is_coroutine = inspect.iscoroutinefunction(fn)

        async def complete(parsed: List[Any], started: float) -> Any:
            with get_tracer().start_as_current_span(
                f"shapeguard.contract:{name}",
                attributes={"shapeguard.function": name, "shapeguard.async": True},
            ):
                try:
                    if is_coroutine:
                        result = await fn(*parsed)
                    else:
                        effective_offload = offload
                        if effective_offload is None:
                            effective_offload = get_config().offload_sync_implementations
                        if effective_offload:
                            result = await anyio.to_thread.run_sync(functools.partial(fn, *parsed))
                        else:
                            result = fn(*parsed)
                        if inspect.isawaitable(result):
                            result = await result
                except Exception as exc:
                    raise self._implementation_failed(name, parsed, exc, started) from exc
                return self._check_result(name, result, started)

        @functools.wraps(fn)
        def async_wrapper(*args):
            """Validate arguments now; return an awaitable for the call itself."""
            started = time.perf_counter()
            parsed = self._check_arguments(name, args, started)
            return complete(parsed, started)

        async_wrapper.__shapeguard_contract__ = self
        return async_wrapper


def function_schema(
    input: Optional[Any] = None,
    output: Optional[Any] = None,
    *,
    error: Optional[ErrorOption] = None,
    **legacy: Any,
) -> FunctionSchema:
    """Declare a function contract.

    :param input: Sequence of argument schemas, or a ``tuple_`` schema (its
                  ``rest`` schema validates extra positional arguments). When
                  omitted, any arguments are accepted.
    :param output: Schema for the return value; anything is accepted when
                   omitted.
    """

    rest: Optional[SchemaNode] = None
    if input is None:
        inputs: Tuple[SchemaNode, ...] = ()
        rest = any_()
    elif isinstance(input, SchemaNode):
        if input.kind is not Kind.TUPLE:
            raise ConfigurationError(
                f"function_schema() input must be a sequence of schemas or a tuple schema, got {input.kind.value}"
            )
        inputs, rest = input.items, input.rest
    elif isinstance(input, Sequence) and not isinstance(input, (str, bytes)):
        inputs = tuple(as_node(schema, f"argument {index}") for index, schema in enumerate(input))
    else:
        raise ConfigurationError(
            f"function_schema() input must be a sequence of schemas, got {type(input).__name__}"
        )

    seen_optional = False
    for index, schema in enumerate(inputs):
        if schema.accepts_missing:
            seen_optional = True
        elif seen_optional:
            raise ConfigurationError(f"Argument {index} is required but follows an optional argument")

    node = SchemaNode(
        kind=Kind.FUNCTION,
        inputs=inputs,
        rest=rest,
        output=as_node(output, "output") if output is not None else any_(),
        error=coerce_error_option(error, **legacy),
    )
    return FunctionSchema(node)


def wrap_callable(node: SchemaNode, fn: Callable) -> Callable:
    """Wrap *fn* in the contract described by a function node."""

    contract = FunctionSchema(node)
    if inspect.iscoroutinefunction(fn):
        return contract.implement_async(fn)
    return contract.implement(fn)


__all__ = ["FunctionSchema", "function_schema", "wrap_callable"]
