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

"""Defensive-programming verification accumulator.

A :class:`Verify` collects a sequence of checks, stops evaluating after the
first failure and hands the failure back as a single exception value.

Three factories control what happens when an accumulator is discarded
without its result being consulted:

- :func:`untracked`: nothing.
- :func:`new`: a diagnostic is written to the unhandled verifications writer.
- :func:`offensive`: the diagnostic is written and the process exits.

Example::

    import verifier

    verify = verifier.new()
    verify.that(order.quantity > 0, "quantity must be positive: %d", order.quantity)
    verify.predicate(lambda: stock.has(order.sku), "%s is out of stock", order.sku)
    if (err := verify.result()) is not None:
        raise err

Diagnostics go to ``sys.stdout`` unless redirected::

    verifier.set_unhandled_verifications_writer(sys.stderr)
"""

from __future__ import annotations

from ._config import (
    TRACKING_ENV,
    disable_tracking,
    enable_tracking,
    reset_tracking,
    tracking_active,
    tracking_enabled,
)
from ._logging import StructuredLogger, configure_logging, get_logger
from ._sink import (
    Writer,
    get_unhandled_verifications_writer,
    redirect_unhandled_verifications,
    set_unhandled_verifications_writer,
)
from ._tracking import (
    MAX_CREATION_FRAMES,
    STRICT_EXIT_CODE,
    CreationFrame,
    render_diagnostic,
)
from ._verify import ErrorFactory, TrackingMode, Verify, new, offensive, untracked
from .errors import (
    INVALID_HANDLE_ERROR,
    InvalidVerifierError,
    VerificationError,
    VerificationFailedError,
    VerifierError,
    format_error,
)

__all__ = [
    "INVALID_HANDLE_ERROR",
    "MAX_CREATION_FRAMES",
    "STRICT_EXIT_CODE",
    "TRACKING_ENV",
    "CreationFrame",
    "ErrorFactory",
    "InvalidVerifierError",
    "StructuredLogger",
    "TrackingMode",
    "VerificationError",
    "VerificationFailedError",
    "Verify",
    "VerifierError",
    "Writer",
    "configure_logging",
    "disable_tracking",
    "enable_tracking",
    "format_error",
    "get_logger",
    "get_unhandled_verifications_writer",
    "new",
    "offensive",
    "redirect_unhandled_verifications",
    "render_diagnostic",
    "reset_tracking",
    "set_unhandled_verifications_writer",
    "tracking_active",
    "tracking_enabled",
    "untracked",
]
