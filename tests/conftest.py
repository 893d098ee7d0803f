"""
Shared fixtures for capfx tests.

The doubles from ``capfx.handlers.testing`` keep every deferred wait under the
test's control, so suspended runs can be inspected before they resume.
"""

from __future__ import annotations

import pytest

from capfx.handlers.testing import ManualDelay, RecordingOutput, ScriptedInput


@pytest.fixture
def output() -> RecordingOutput:
    return RecordingOutput()


@pytest.fixture
def scripted_input() -> ScriptedInput:
    return ScriptedInput()


@pytest.fixture
def manual_delay() -> ManualDelay:
    return ManualDelay()
