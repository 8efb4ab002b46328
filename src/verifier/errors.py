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

"""Exception hierarchy for :mod:`verifier`."""

from __future__ import annotations

INVALID_HANDLE_MESSAGE = "verifier instance is invalid"
FAILURE_PREFIX = "verification failure: "


class VerifierError(Exception):
    """Base class for all verifier exceptions.

    Callers can catch every library-specific error with a single handler
    while standard Python exceptions propagate normally. Subclasses also
    inherit from a standard exception type so handlers written against
    ``ValueError``, ``AssertionError`` or ``RuntimeError`` keep working.
    """


class VerificationError(VerifierError, ValueError):
    """Default error recorded when a check fails.

    Produced by :func:`format_error`. Instances are returned from
    :meth:`Verify.result`, never raised by the accumulator itself.

    Example::

        verify = verifier.new()
        verify.that(age >= 21, "customer age should be 21 or higher: %d", age)
        if (err := verify.result()) is not None:
            return err
    """


class VerificationFailedError(VerifierError, AssertionError):
    """Raised by :meth:`Verify.raise_if_failed` when a failure was recorded.

    The message carries the ``"verification failure: "`` prefix followed by
    the recorded error's message. The recorded error is attached as
    ``__cause__``.
    """


class InvalidVerifierError(VerifierError, RuntimeError):
    """Operation performed on an invalid accumulator handle.

    Returned (as the fixed :data:`INVALID_HANDLE_ERROR` sentinel) from
    :meth:`Verify.result` and raised from :meth:`Verify.raise_if_failed`
    when the handle was never constructed.
    """


INVALID_HANDLE_ERROR = InvalidVerifierError(INVALID_HANDLE_MESSAGE)


def format_error(message: str, *args: object) -> VerificationError:
    """Build the default failure error.

    ``args`` are applied with ``%``-style formatting, the same convention the
    stdlib logging calls use. Without ``args`` the message is kept verbatim so
    literal ``%`` characters survive.
    """

    if args:
        return VerificationError(message % args)
    return VerificationError(message)


__all__ = [
    "FAILURE_PREFIX",
    "INVALID_HANDLE_ERROR",
    "INVALID_HANDLE_MESSAGE",
    "InvalidVerifierError",
    "VerificationError",
    "VerificationFailedError",
    "VerifierError",
    "format_error",
]
