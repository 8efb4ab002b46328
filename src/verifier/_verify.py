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

"""Short-circuiting verification accumulator."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from types import TracebackType
from typing import Self, override

from ._config import tracking_active
from ._tracking import CreationFrame, capture_creation_stack, track
from .errors import (
    FAILURE_PREFIX,
    INVALID_HANDLE_ERROR,
    INVALID_HANDLE_MESSAGE,
    InvalidVerifierError,
    VerificationFailedError,
    format_error,
)

type ErrorFactory = Callable[..., Exception]


class TrackingMode(Enum):
    """How an accumulator reacts to being discarded unconsulted."""

    UNTRACKED = auto()
    TRACKED = auto()
    STRICT = auto()


@dataclass(slots=True)
class _Record:
    valid: bool = True
    error: Exception | None = None
    consulted: bool = False
    creation_stack: tuple[CreationFrame, ...] = field(default_factory=tuple)

    def describe(self) -> str:
        if not self.valid:
            return FAILURE_PREFIX + INVALID_HANDLE_MESSAGE
        if self.error is None:
            return "verification success"
        return FAILURE_PREFIX + str(self.error)


class Verify:
    """Accumulates checks and keeps the first failure.

    All checks return the accumulator itself so they can be chained. After
    the first failed check every later check is skipped, and predicates are
    not evaluated at all, so cheap checks should come before expensive ones.

    Example::

        def sell_alcohol(person: Person | None) -> Exception | None:
            verify = verifier.new()
            verify.not_none(person, "person can't be None").raise_if_failed()
            verify.that(person.age >= 21, "age should be 21 or higher: %d", person.age)
            verify.that(person.has_license, "customer should have license")
            return verify.result()

    Tracked and strict accumulators (see :func:`new` and :func:`offensive`)
    report themselves when reclaimed without :meth:`result` or
    :meth:`raise_if_failed` having been called after the last check.
    """

    __slots__ = ("__weakref__", "_error_factory", "_mode", "_record")

    def __init__(
        self,
        *,
        mode: TrackingMode = TrackingMode.UNTRACKED,
        error_factory: ErrorFactory | None = None,
    ) -> None:
        if mode is not TrackingMode.UNTRACKED and not tracking_active():
            mode = TrackingMode.UNTRACKED
        self._mode = mode
        self._error_factory: ErrorFactory = error_factory or format_error
        self._record = _Record()
        if mode is not TrackingMode.UNTRACKED:
            self._record.creation_stack = capture_creation_stack()
            track(self, self._record, strict=mode is TrackingMode.STRICT)

    @classmethod
    def invalid(cls) -> Verify:
        """Return a handle that behaves as if it was never constructed.

        Checks on it are no-ops, :meth:`result` returns
        :data:`~verifier.errors.INVALID_HANDLE_ERROR` and
        :meth:`raise_if_failed` raises :class:`InvalidVerifierError`.
        """

        verify = cls()
        verify._record.valid = False
        return verify

    @classmethod
    def of(cls, handle: Verify | None) -> Verify:
        """Return ``handle`` or, when it is ``None``, an invalid handle."""

        if handle is None:
            return cls.invalid()
        return handle

    @property
    def mode(self) -> TrackingMode:
        return self._mode

    @property
    def is_valid(self) -> bool:
        return self._record.valid

    @property
    def failed(self) -> bool:
        """``True`` once a check failed or when the handle is invalid.

        Inspecting this does not consult the result.
        """

        return not self._record.valid or self._record.error is not None

    def with_error_factory(self, factory: ErrorFactory) -> Self:
        """Use ``factory(message, *args)`` to build errors for later failures."""

        self._error_factory = factory
        return self

    def _open(self) -> bool:
        """Reopen the consult obligation; return whether checks still run."""

        record = self._record
        record.consulted = False
        return record.valid and record.error is None

    def that(self, condition: object, message: str, *args: object) -> Self:
        """Fail with ``message % args`` when ``condition`` is falsy."""

        if self._open() and not condition:
            self._record.error = self._error_factory(message, *args)
        return self

    def predicate(
        self, predicate: Callable[[], object], message: str, *args: object
    ) -> Self:
        """Like :meth:`that`, but ``predicate`` is only called if nothing failed yet."""

        if self._open() and not predicate():
            self._record.error = self._error_factory(message, *args)
        return self

    def with_error(self, condition: object, error: Exception) -> Self:
        """Record ``error`` unchanged when ``condition`` is falsy."""

        if self._open() and not condition:
            self._record.error = error
        return self

    def not_none(self, value: object, message: str, *args: object) -> Self:
        """Fail with ``message % args`` when ``value`` is ``None``."""

        return self.that(value is not None, message, *args)

    def result(self) -> Exception | None:
        """Return the first recorded failure, or ``None``.

        Marks the result as consulted.
        """

        record = self._record
        if not record.valid:
            return INVALID_HANDLE_ERROR
        record.consulted = True
        return record.error

    def raise_if_failed(self) -> None:
        """Raise :class:`VerificationFailedError` if any check failed.

        Marks the result as consulted.
        """

        record = self._record
        if not record.valid:
            raise InvalidVerifierError(INVALID_HANDLE_MESSAGE)
        record.consulted = True
        if record.error is not None:
            raise VerificationFailedError(
                FAILURE_PREFIX + str(record.error)
            ) from record.error

    def describe(self) -> str:
        return self._record.describe()

    @override
    def __str__(self) -> str:
        return self.describe()

    @override
    def __repr__(self) -> str:
        return f"Verify(mode={self._mode.name}, status={self.describe()!r})"

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.raise_if_failed()
        elif self._record.valid:
            self._record.consulted = True


def untracked(*, error_factory: ErrorFactory | None = None) -> Verify:
    """Create an accumulator that never reports itself."""

    return Verify(mode=TrackingMode.UNTRACKED, error_factory=error_factory)


def new(*, error_factory: ErrorFactory | None = None) -> Verify:
    """Create a tracked accumulator (recommended).

    If it is reclaimed without :meth:`Verify.result` or
    :meth:`Verify.raise_if_failed` having been called after the last check,
    a diagnostic naming its creation site is written to the unhandled
    verifications writer (``sys.stdout`` by default).
    """

    return Verify(mode=TrackingMode.TRACKED, error_factory=error_factory)


def offensive(*, error_factory: ErrorFactory | None = None) -> Verify:
    """Create a strict accumulator.

    Behaves like :func:`new`, and additionally terminates the process with
    exit status 1 after reporting an unconsulted verification. Meant for
    offensive programming, where forgetting to check a result is a bug that
    must not survive. Use it wisely.
    """

    return Verify(mode=TrackingMode.STRICT, error_factory=error_factory)


__all__ = [
    "ErrorFactory",
    "TrackingMode",
    "Verify",
    "new",
    "offensive",
    "untracked",
]
