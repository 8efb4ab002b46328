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

"""Process-wide switch for unhandled-verification tracking."""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

TRACKING_ENV = "VERIFIER_TRACKING"
_forced_state: bool | None = None


def _coerce_flag(value: str | None) -> bool:
    if value is None:
        return True
    lowered = value.strip().lower()
    return lowered not in {"", "0", "false", "off", "no"}


def tracking_active() -> bool:
    """Return ``True`` when tracked and strict factories should track."""

    if _forced_state is not None:
        return _forced_state
    return _coerce_flag(os.getenv(TRACKING_ENV))


def enable_tracking() -> None:
    """Force tracking on regardless of the environment."""

    global _forced_state
    _forced_state = True


def disable_tracking() -> None:
    """Force tracking off regardless of the environment."""

    global _forced_state
    _forced_state = False


def reset_tracking() -> None:
    """Drop any forced state and defer to ``VERIFIER_TRACKING`` again."""

    global _forced_state
    _forced_state = None


@contextmanager
def tracking_enabled(*, active: bool = True) -> Iterator[None]:
    """Temporarily force the tracking flag inside a ``with`` block."""

    global _forced_state
    previous = _forced_state
    _forced_state = active
    try:
        yield
    finally:
        _forced_state = previous


__all__ = [
    "TRACKING_ENV",
    "disable_tracking",
    "enable_tracking",
    "reset_tracking",
    "tracking_active",
    "tracking_enabled",
]
