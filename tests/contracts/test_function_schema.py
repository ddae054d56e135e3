# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

import pickle
import threading

import pytest

from shapeguard import (
    ConfigurationError,
    FunctionSchema,
    ImplementationError,
    ValidationError,
    boolean,
    configure,
    function_schema,
    number,
    object_,
    optional,
    string,
    tuple_,
)


@pytest.fixture()
def longer_than():
    return function_schema(input=[string(), number()], output=boolean())


# ---------------------------------------------------------------------------
# Synchronous contracts
# ---------------------------------------------------------------------------


def test_sync_contract_passes_valid_call_through(longer_than):
    check = longer_than.implement(lambda text, limit: len(text) > limit)

    assert check("hello", 3) is True
    assert check("hi", 3) is False


def test_sync_contract_rejects_bad_arguments_without_calling(longer_than):
    """
    GIVEN: A (string, number) -> boolean contract
    WHEN: Both arguments have the wrong type
    THEN: ValidationError lists an issue per argument position and the
          implementation never runs
    """
    calls = []

    def implementation(text, limit):
        calls.append((text, limit))
        return True

    check = longer_than.implement(implementation)

    with pytest.raises(ValidationError) as exc_info:
        check(1, "x")

    assert [issue.path for issue in exc_info.value.issues] == [(0,), (1,)]
    assert "Invalid arguments for" in str(exc_info.value)
    assert calls == []


def test_wrong_argument_count_is_arity_mismatch(longer_than):
    check = longer_than.implement(lambda text, limit: True)

    with pytest.raises(ValidationError) as exc_info:
        check("only one")

    issue = exc_info.value.issues[0]
    assert issue.code == "arity_mismatch"
    assert (issue.minimum, issue.maximum, issue.received) == (2, 2, 1)
    assert issue.message == "Invalid arguments: expected 2, received 1"


def test_bad_return_value_raises_validation_error(longer_than):
    check = longer_than.implement(lambda text, limit: "yes")

    with pytest.raises(ValidationError) as exc_info:
        check("abc", 1)

    assert exc_info.value.issues[0].path == ()
    assert "Invalid return value" in str(exc_info.value)


def test_implementation_failure_is_wrapped(longer_than):
    def explode(text, limit):
        raise KeyError("nope")

    check = longer_than.implement(explode)

    with pytest.raises(ImplementationError) as exc_info:
        check("abc", 1)

    error = exc_info.value
    assert isinstance(error.__cause__, KeyError)
    assert error.original is error.__cause__
    assert error.issue.code == "implementation_error"
    assert "explode" in error.function_name


def test_implementation_error_survives_pickling(longer_than):
    def explode(text, limit):
        raise ValueError("boom")

    with pytest.raises(ImplementationError) as exc_info:
        longer_than.implement(explode)("abc", 1)

    restored = pickle.loads(pickle.dumps(exc_info.value))

    assert restored.function_name == exc_info.value.function_name
    assert isinstance(restored.original, ValueError)
    assert restored.issue.code == "implementation_error"
    assert str(restored) == str(exc_info.value)


def test_sync_contract_refuses_awaitable_result(longer_than):
    async def later():
        return True

    check = longer_than.implement(lambda text, limit: later())

    with pytest.raises(ConfigurationError, match="implement_async"):
        check("abc", 1)


def test_implement_rejects_coroutine_functions(longer_than):
    async def implementation(text, limit):
        return True

    with pytest.raises(ConfigurationError):
        longer_than.implement(implementation)


def test_transformed_arguments_reach_implementation():
    contract = function_schema(input=[string().transform(str.upper)], output=string())
    shout = contract.implement(lambda text: text + "!")

    assert shout("hey") == "HEY!"


def test_optional_trailing_argument_may_be_omitted():
    contract = function_schema(input=[string(), optional(number())])
    greet = contract.implement(lambda name, times=1: name * times)

    assert greet("ab") == "ab"
    assert greet("ab", 2) == "abab"
    with pytest.raises(ValidationError):
        greet()


def test_tuple_input_with_rest_accepts_variadic_arguments():
    contract = function_schema(input=tuple_([string()], rest=number()), output=number())
    total = contract.implement(lambda label, *values: sum(values))

    assert total("sum", 1, 2, 3) == 6
    with pytest.raises(ValidationError) as exc_info:
        total("sum", 1, "two")
    assert exc_info.value.issues[0].path == (2,)


def test_no_input_schema_accepts_any_arguments():
    contract = function_schema(output=number())
    count = contract.implement(lambda *args: len(args))

    assert count() == 0
    assert count("a", None, 3) == 3


def test_wrapper_keeps_metadata(longer_than):
    def is_longer(text, limit):
        """Docstring survives."""
        return len(text) > limit

    wrapped = longer_than.implement(is_longer)

    assert wrapped.__name__ == "is_longer"
    assert wrapped.__doc__ == "Docstring survives."
    assert wrapped.__shapeguard_contract__ is longer_than


def test_function_schema_as_object_member_wraps_callables():
    schema = object_({"callback": function_schema(input=[number()], output=number())})

    parsed = schema.parse({"callback": lambda n: n + 1})

    assert parsed["callback"](1) == 2
    with pytest.raises(ValidationError):
        parsed["callback"]("one")
    assert schema.safe_parse({"callback": 42}).issues[0].code == "invalid_type"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"input": string()},
        {"input": "abc"},
        {"input": [optional(string()), number()]},
    ],
)
def test_function_schema_construction_errors(kwargs):
    with pytest.raises(ConfigurationError):
        function_schema(**kwargs)


def test_function_schema_exposes_input_and_output(longer_than):
    assert isinstance(longer_than, FunctionSchema)
    assert [node.kind.value for node in longer_than.input] == ["string", "number"]
    assert longer_than.output.kind.value == "boolean"


# ---------------------------------------------------------------------------
# Asynchronous contracts
# ---------------------------------------------------------------------------


@pytest.mark.anyio
async def test_async_contract_awaits_coroutine(longer_than):
    async def implementation(text, limit):
        return len(text) > limit

    check = longer_than.implement_async(implementation)

    assert await check("hello", 3) is True


def test_async_contract_validates_arguments_before_awaiting(longer_than):
    """
    GIVEN: An async contract
    WHEN: It is called with bad arguments
    THEN: ValidationError is raised by the call itself, before anything is awaited
    """
    started = []

    async def implementation(text, limit):
        started.append(True)
        return True

    check = longer_than.implement_async(implementation)

    with pytest.raises(ValidationError):
        check(1, 2)
    assert started == []


@pytest.mark.anyio
async def test_async_contract_validates_return_value(longer_than):
    async def implementation(text, limit):
        return 42

    check = longer_than.implement_async(implementation)

    with pytest.raises(ValidationError):
        await check("abc", 1)


@pytest.mark.anyio
async def test_async_contract_wraps_implementation_errors(longer_than):
    async def implementation(text, limit):
        raise ValueError("bad")

    check = longer_than.implement_async(implementation)

    with pytest.raises(ImplementationError) as exc_info:
        await check("abc", 1)
    assert isinstance(exc_info.value.__cause__, ValueError)


@pytest.mark.anyio
async def test_async_contract_offloads_plain_callables(longer_than):
    seen = {}

    def implementation(text, limit):
        seen["thread"] = threading.current_thread()
        return len(text) > limit

    check = longer_than.implement_async(implementation)

    assert await check("hello", 3) is True
    assert seen["thread"] is not threading.main_thread()


@pytest.mark.anyio
async def test_async_contract_runs_inline_when_offload_disabled(longer_than):
    configure(offload_sync_implementations=False)
    seen = {}

    def implementation(text, limit):
        seen["thread"] = threading.current_thread()
        return True

    check = longer_than.implement_async(implementation)

    assert await check("abc", 1) is True
    assert seen["thread"] is threading.current_thread()


@pytest.mark.anyio
async def test_async_contract_awaits_awaitable_from_plain_callable(longer_than):
    async def later(text, limit):
        return len(text) > limit

    check = longer_than.implement_async(lambda text, limit: later(text, limit), offload=False)

    assert await check("hello", 1) is True
