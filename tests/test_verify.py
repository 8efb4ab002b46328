# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for the verification accumulator."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import pytest

import verifier
from tests.helpers import SafeBuffer
from verifier import (
    INVALID_HANDLE_ERROR,
    InvalidVerifierError,
    TrackingMode,
    VerificationError,
    VerificationFailedError,
    Verify,
)


class CustomError(Exception):
    """Typed error produced by a caller-supplied factory."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message.format(*args))


@dataclass
class Person:
    name: str
    age: int
    has_license: bool


def sell_alcohol(person: Person | None) -> Exception | None:
    verify = verifier.new()
    verify.not_none(person, "person can't be None").raise_if_failed()
    assert person is not None
    verify.that(
        person.age >= 21,
        "customer age should be 21 or higher, but yours: %d",
        person.age,
    )
    verify.that(person.has_license, "customer should have license")
    return verify.result()


def test_positive_conditions_produce_no_error() -> None:
    verify = (
        verifier.untracked()
        .with_error(True, ValueError("should never be recorded"))
        .that(1 > 0, "one should be positive")
        .that(True, "some other check with format %s; %d", "testCheck", 35)
    )

    assert verify.result() is None
    assert verify.describe() == "verification success"


def test_first_failure_wins() -> None:
    verify = verifier.untracked()
    verify.that(True, "A").that(True, "B").that(False, "X").that(True, "C")
    verify.that(False, "should not have any difference")

    err = verify.result()
    assert isinstance(err, VerificationError)
    assert str(err) == "X"
    assert str(verify) == "verification failure: X"


def test_messages_are_formatted_with_args() -> None:
    err = verifier.untracked().that(False, "expect error %s", "here").result()

    assert str(err) == "expect error here"


def test_messages_without_args_are_kept_verbatim() -> None:
    err = verifier.untracked().that(False, "100% broken").result()

    assert str(err) == "100% broken"


def test_with_error_preserves_error_identity() -> None:
    expected = KeyError("expect error here")
    verify = verifier.untracked()
    verify.with_error(False, expected)
    verify.with_error(False, RuntimeError("should not have any difference"))

    assert verify.result() is expected


def test_predicates_are_not_evaluated_after_failure() -> None:
    counter = 0

    def check(outcome: bool) -> bool:
        nonlocal counter
        counter += 1
        return outcome

    verify = verifier.untracked()
    verify.predicate(lambda: check(True), "should be ok")
    verify.predicate(lambda: check(True), "still OK")
    verify.predicate(lambda: check(False), "should break here")
    verify.predicate(lambda: check(True), "won't evaluate")

    assert str(verify.result()) == "should break here"
    assert counter == 3


def test_failed_condition_prevents_expensive_predicate() -> None:
    def expensive() -> bool:
        raise AssertionError("predicate must not run")

    verify = verifier.untracked().that(False, "cheap check").predicate(
        expensive, "expensive check"
    )

    assert str(verify.result()) == "cheap check"


def test_checks_return_the_same_handle() -> None:
    verify = verifier.untracked()

    assert verify.that(True, "a") is verify
    assert verify.predicate(lambda: True, "b") is verify
    assert verify.with_error(True, ValueError("c")) is verify
    assert verify.not_none(object(), "d") is verify
    assert verify.with_error_factory(CustomError) is verify


def test_not_none_fails_only_for_none() -> None:
    assert verifier.untracked().not_none(0, "zero is a value").result() is None
    err = verifier.untracked().not_none(None, "value of %s is missing", "x").result()

    assert str(err) == "value of x is missing"


def test_result_is_idempotent() -> None:
    verify = verifier.untracked().that(False, "X")

    first = verify.result()
    assert verify.result() is first
    verify.that(False, "Y")
    assert verify.result() is first


def test_failed_property_does_not_consult() -> None:
    verify = verifier.untracked()
    assert not verify.failed
    verify.that(False, "X")
    assert verify.failed


def test_raise_if_failed_raises_prefixed_message() -> None:
    verify = verifier.new().that(len("") != 0, "empty string is not None")

    with pytest.raises(VerificationFailedError) as exc:
        verify.raise_if_failed()

    assert str(exc.value) == "verification failure: empty string is not None"
    assert isinstance(exc.value.__cause__, VerificationError)
    assert isinstance(exc.value, AssertionError)


def test_raise_if_failed_returns_normally_on_success() -> None:
    verify = verifier.new().that(True, "fine")

    verify.raise_if_failed()

    assert verify.describe() == "verification success"


def test_custom_error_factory_produces_typed_errors() -> None:
    err = (
        verifier.new()
        .with_error_factory(CustomError)
        .that(False, "test error message {}", 7)
        .result()
    )

    assert type(err) is CustomError
    assert str(err) == "test error message 7"


def test_error_factory_keyword_on_factories() -> None:
    err = verifier.new(error_factory=CustomError).that(False, "typed").result()

    assert type(err) is CustomError


@pytest.mark.parametrize(
    "factory",
    [verifier.untracked, verifier.new, verifier.offensive, Verify],
)
def test_default_error_type(factory: Callable[[], Verify]) -> None:
    err = factory().that(False, "test error message").result()

    assert type(err) is VerificationError


@pytest.mark.parametrize(
    ("factory", "mode"),
    [
        (verifier.untracked, TrackingMode.UNTRACKED),
        (verifier.new, TrackingMode.TRACKED),
        (verifier.offensive, TrackingMode.STRICT),
    ],
)
def test_factories_select_mode(
    factory: Callable[[], Verify], mode: TrackingMode
) -> None:
    verify = factory()
    _ = verify.result()

    assert verify.mode is mode


def test_invalid_handle_checks_are_noops() -> None:
    counter = 0

    def predicate() -> bool:
        nonlocal counter
        counter += 1
        return False

    verify = Verify.of(None)
    verify.that(False, "never recorded").predicate(predicate, "should not evaluate")
    verify.with_error(False, ValueError("never recorded"))

    assert counter == 0
    assert not verify.is_valid
    assert verify.failed
    assert verify.result() is INVALID_HANDLE_ERROR
    assert str(INVALID_HANDLE_ERROR) == "verifier instance is invalid"


def test_invalid_handle_raises_sentinel_message() -> None:
    verify = Verify.invalid()

    with pytest.raises(InvalidVerifierError, match="^verifier instance is invalid$"):
        verify.raise_if_failed()


def test_invalid_handle_describes_itself_as_failure() -> None:
    assert (
        Verify.invalid().describe()
        == "verification failure: verifier instance is invalid"
    )


def test_of_returns_existing_handle() -> None:
    verify = verifier.untracked()

    assert Verify.of(verify) is verify


def test_scoped_block_raises_on_failure() -> None:
    with pytest.raises(VerificationFailedError, match="verification failure: boom"):
        with verifier.new() as verify:
            verify.that(False, "boom")


def test_scoped_block_passes_when_all_checks_hold() -> None:
    with verifier.new() as verify:
        verify.that(True, "fine")

    assert verify.describe() == "verification success"


def test_scoped_block_lets_body_exceptions_through(diagnostics: SafeBuffer) -> None:
    def run() -> None:
        with verifier.new() as verify:
            verify.that(False, "masked by body error")
            raise LookupError("body failed")

    with pytest.raises(LookupError):
        run()

    assert diagnostics.getvalue() == ""


def test_sell_alcohol_example() -> None:
    err = sell_alcohol(Person(name="John Smith", age=42, has_license=False))

    assert str(err) == "customer should have license"


def test_sell_alcohol_example_escalates_missing_person() -> None:
    with pytest.raises(VerificationFailedError, match="person can't be None"):
        _ = sell_alcohol(None)


def test_repr_names_mode_and_status() -> None:
    verify = verifier.untracked().that(False, "X")

    assert repr(verify) == "Verify(mode=UNTRACKED, status='verification failure: X')"
