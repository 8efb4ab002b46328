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

from __future__ import annotations

from collections.abc import Iterator

import pytest

import verifier._tracking
from tests.helpers import SafeBuffer, collect
from verifier import (
    TRACKING_ENV,
    redirect_unhandled_verifications,
    reset_tracking,
    set_unhandled_verifications_writer,
)


@pytest.fixture(autouse=True)
def reset_verifier_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test with tracking on and the default writer.

    Strict termination is stubbed out so a stray strict verification cannot
    take the test process down; tests that need it patch it again.
    """

    monkeypatch.delenv(TRACKING_ENV, raising=False)
    monkeypatch.setattr(verifier._tracking, "_terminate", lambda: None)
    reset_tracking()
    yield
    collect()
    reset_tracking()
    set_unhandled_verifications_writer(None)


@pytest.fixture
def diagnostics() -> Iterator[SafeBuffer]:
    """Capture unhandled-verification diagnostics for the test's duration."""

    buffer = SafeBuffer()
    with redirect_unhandled_verifications(buffer):
        yield buffer
        collect()
