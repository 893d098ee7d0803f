"""
Utility functions for the capfx library.
"""

import linecache
import os
import sys
from typing import Optional


_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def _is_capfx_internal(path: str) -> bool:
    return os.path.abspath(path).startswith(_PACKAGE_DIR + os.sep)


# Environment variable to control debug mode
DEBUG_EFFECTS = os.environ.get("CAPFX_DEBUG", "").lower() in ("1", "true", "yes")


def capture_creation_context(skip_frames: int = 2) -> Optional["EffectCreationContext"]:
    """
    Capture the current stack context for debugging descriptor creation.

    Frames inside capfx itself are skipped so the location points at the
    user code that built the descriptor.

    Args:
        skip_frames: Number of frames to skip (default 2 to skip this function and caller)

    Returns:
        EffectCreationContext with frame info, or None when frames are unavailable
    """
    from capfx.types import EffectCreationContext

    try:
        frame = sys._getframe(skip_frames)
    except ValueError:
        return None

    while frame.f_back is not None and _is_capfx_internal(frame.f_code.co_filename):
        frame = frame.f_back

    filename = frame.f_code.co_filename
    line = frame.f_lineno
    code = linecache.getline(filename, line).strip() or None

    stack_data = []
    current_frame = frame.f_back
    max_depth = 12 if DEBUG_EFFECTS else 0
    while current_frame is not None and len(stack_data) < max_depth:
        frame_filename = current_frame.f_code.co_filename
        frame_data = {
            "filename": frame_filename,
            "line": current_frame.f_lineno,
            "function": current_frame.f_code.co_name,
        }
        code_line = linecache.getline(frame_filename, current_frame.f_lineno)
        if code_line:
            frame_data["code"] = code_line.strip()
        stack_data.append(frame_data)
        current_frame = current_frame.f_back

    return EffectCreationContext(
        filename=filename,
        line=line,
        function=frame.f_code.co_name,
        code=code,
        stack_trace=stack_data,
    )


__all__ = [
    "DEBUG_EFFECTS",
    "capture_creation_context",
]
