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

"""Process-wide destination for unhandled-verification diagnostics.

Exactly one writer is active at a time. Replacing it and reading it are
atomic: the lifecycle tracker snapshots the current writer under a lock and
writes outside the lock, so a concurrent replacement never blocks or tears
an in-flight diagnostic.

Example::

    buffer = io.StringIO()
    with redirect_unhandled_verifications(buffer):
        run_workload()
    print(buffer.getvalue())
"""

from __future__ import annotations

import io
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Protocol


class Writer(Protocol):
    """Anything with a ``write`` method: text streams or binary streams."""

    def write(self, data: str, /) -> object: ...


@dataclass(slots=True)
class _WriterSlot:
    """Holds the configured writer; ``None`` means "use sys.stdout"."""

    _writer: Writer | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def swap(self, writer: Writer | None) -> Writer | None:
        with self._lock:
            previous = self._writer
            self._writer = writer
            return previous

    def load(self) -> Writer | None:
        with self._lock:
            return self._writer


_SLOT = _WriterSlot()


def set_unhandled_verifications_writer(writer: Writer | None) -> None:
    """Replace the process-wide diagnostic writer.

    Passing ``None`` restores the default, which is whatever ``sys.stdout``
    refers to at the moment a diagnostic is written.
    """

    _ = _SLOT.swap(writer)


def get_unhandled_verifications_writer() -> Writer | None:
    """Return the writer a diagnostic emitted now would use.

    Returns ``None`` only when no writer is configured and ``sys.stdout`` is
    unavailable (for example under ``pythonw``).
    """

    writer = _SLOT.load()
    if writer is None:
        return sys.stdout
    return writer


@contextmanager
def redirect_unhandled_verifications(writer: Writer | None) -> Iterator[None]:
    """Install ``writer`` for the duration of a ``with`` block."""

    previous = _SLOT.swap(writer)
    try:
        yield
    finally:
        _ = _SLOT.swap(previous)


def _is_binary(writer: Writer) -> bool:
    if isinstance(writer, (io.RawIOBase, io.BufferedIOBase)):
        return True
    mode = getattr(writer, "mode", None)
    return isinstance(mode, str) and "b" in mode


def emit(text: str) -> None:
    """Write ``text`` to the current writer in a single call and flush it.

    Binary streams receive UTF-8 encoded bytes. A writer that rejects ``str``
    with ``TypeError`` is retried once with bytes. Other errors from the
    writer propagate to the caller.
    """

    writer = get_unhandled_verifications_writer()
    if writer is None:
        return
    if _is_binary(writer):
        _ = writer.write(text.encode("utf-8"))  # pyright: ignore[reportArgumentType]
    else:
        try:
            _ = writer.write(text)
        except TypeError:
            _ = writer.write(text.encode("utf-8"))  # pyright: ignore[reportArgumentType]
    flush = getattr(writer, "flush", None)
    if callable(flush):
        _ = flush()


__all__ = [
    "Writer",
    "emit",
    "get_unhandled_verifications_writer",
    "redirect_unhandled_verifications",
    "set_unhandled_verifications_writer",
]
