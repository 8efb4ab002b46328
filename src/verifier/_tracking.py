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

"""Best-effort detection of verifications discarded without being consulted.

Tracked accumulators capture their creation stack and register a
:func:`weakref.finalize` callback bound to their state record (never to the
accumulator itself, which would keep it alive). When the accumulator is
reclaimed the callback checks whether a terminal query consulted the result
and, if not, writes a diagnostic to the configured writer. Strict
accumulators then terminate the process.

Timing is up to the interpreter: CPython usually fires the callback as soon
as the last reference disappears, but reference cycles delay it until the
next garbage collection, and pending callbacks are discarded at shutdown.
Nothing here is relied upon for correctness.
"""

from __future__ import annotations

import inspect
import logging
import os
import weakref
from dataclasses import dataclass
from pathlib import Path
from types import FrameType
from typing import Protocol

from ._logging import get_logger
from ._sink import emit

MAX_CREATION_FRAMES = 32
STRICT_EXIT_CODE = 1

_LIBRARY_DIR = str(Path(__file__).resolve().parent)

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CreationFrame:
    """One frame of the call stack active when an accumulator was created."""

    function: str
    filename: str
    lineno: int


class TrackedRecord(Protocol):
    """State shared between an accumulator and its finalizer."""

    @property
    def consulted(self) -> bool: ...

    @property
    def creation_stack(self) -> tuple[CreationFrame, ...]: ...

    def describe(self) -> str: ...


def _is_library_frame(frame: FrameType) -> bool:
    filename = frame.f_code.co_filename
    try:
        return str(Path(filename).resolve().parent) == _LIBRARY_DIR
    except OSError:  # pragma: no cover - unresolvable pseudo filenames
        return False


def capture_creation_stack(
    limit: int = MAX_CREATION_FRAMES,
) -> tuple[CreationFrame, ...]:
    """Return the caller's stack, most recent frame first.

    Frames belonging to this package are skipped so the first entry is the
    code that asked for the accumulator.
    """

    frame = inspect.currentframe()
    while frame is not None and _is_library_frame(frame):
        frame = frame.f_back

    frames: list[CreationFrame] = []
    while frame is not None and len(frames) < limit:
        code = frame.f_code
        module = frame.f_globals.get("__name__", "<unknown>")
        frames.append(
            CreationFrame(
                function=f"{module}.{code.co_qualname}",
                filename=code.co_filename,
                lineno=frame.f_lineno,
            )
        )
        frame = frame.f_back
    return tuple(frames)


def render_diagnostic(description: str, frames: tuple[CreationFrame, ...]) -> str:
    """Format the unhandled-verification report consumed by log scrapers."""

    lines = [
        f"[ERROR] found unhandled verification: {description}\n",
        "verification was created here:\n",
    ]
    lines.extend(
        f"{frame.function}\n\t{frame.filename}:{frame.lineno}\n" for frame in frames
    )
    return "".join(lines)


def track(owner: object, record: TrackedRecord, *, strict: bool) -> None:
    """Report ``record`` once ``owner`` is reclaimed unconsulted."""

    finalizer = weakref.finalize(owner, _report_unhandled, record, strict)
    finalizer.atexit = False


def _report_unhandled(record: TrackedRecord, strict: bool) -> None:
    if record.consulted:
        return

    description = record.describe()
    log_context = {"description": description, "strict": strict}
    try:
        emit(render_diagnostic(description, record.creation_stack))
    except Exception:
        logger.exception(
            "Failed to write unhandled verification diagnostic.",
            event="verifier.diagnostic_write_failed",
            context=log_context,
        )
    else:
        logger.debug(
            "Reported unhandled verification.",
            event="verifier.unhandled",
            context=log_context,
        )

    if strict:
        logger.critical(
            "Terminating process: strict verification was never consulted.",
            event="verifier.strict_exit",
            context=log_context,
        )
        _terminate()


def _terminate() -> None:  # pragma: no cover - terminates process
    logging.shutdown()
    os._exit(STRICT_EXIT_CODE)


__all__ = [
    "MAX_CREATION_FRAMES",
    "STRICT_EXIT_CODE",
    "CreationFrame",
    "TrackedRecord",
    "capture_creation_stack",
    "render_diagnostic",
    "track",
]
