"""
Host/embedded boundary: capture host failures raised from embedded calls.

Embedded modules are marked through their globals (SCRIPT_MARKER). A host
function decorated with ``host_call`` checks whether its caller is an
embedded frame; if so, any host error it raises leaves as a BridgingError
tagged with the caller's module, function, line and source.

Copyright (c) 2025 Graziano Labs Corp.
"""

import functools
import linecache
import sys
import traceback
from types import FrameType, TracebackType
from typing import Callable, List, Optional, TypeVar

from ..errors import BridgingError

SCRIPT_MARKER = "__algobridge_script__"

F = TypeVar("F", bound=Callable)


def is_script_frame(frame: Optional[FrameType]) -> bool:
    """True if ``frame`` executes code loaded by the embedded runtime."""
    return frame is not None and bool(frame.f_globals.get(SCRIPT_MARKER))


def frame_summary(frame: FrameType, lineno: Optional[int] = None) -> traceback.FrameSummary:
    code = frame.f_code
    lineno = lineno if lineno is not None else frame.f_lineno
    line = linecache.getline(code.co_filename, lineno).strip()
    return traceback.FrameSummary(
        code.co_filename, lineno, code.co_name,
        lookup_line=False, line=line or None
    )


def caller_stack(frame: FrameType) -> List[traceback.FrameSummary]:
    """Embedded frames above ``frame``, innermost first, up to the first host frame."""
    stack = []
    current = frame.f_back
    while is_script_frame(current):
        stack.append(frame_summary(current))
        current = current.f_back
    return stack


def script_frames(tb: Optional[TracebackType]) -> List[traceback.FrameSummary]:
    """Embedded frames of a traceback, outermost first."""
    return [
        frame_summary(frame, lineno)
        for frame, lineno in traceback.walk_tb(tb)
        if is_script_frame(frame)
    ]


def bridging_error(error: BaseException, frame: FrameType) -> BridgingError:
    """Build a BridgingError for ``error`` raised from the call made in ``frame``."""
    site = frame_summary(frame)
    return BridgingError(
        inner_error=error,
        source_module=frame.f_globals.get("__name__", site.filename),
        source_function=site.name,
        source_line=site.lineno,
        source_snippet=site.line,
        script_stack=caller_stack(frame)
    )


def host_call(func: F) -> F:
    """
    Mark ``func`` as host-native functionality callable from embedded code.

    Errors raised while an embedded frame is the direct caller become
    BridgingErrors (raised from the original). Calls from host code and
    errors that already are BridgingErrors pass through untouched.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BridgingError:
            raise
        except Exception as exc:
            caller = sys._getframe(1)
            try:
                if not is_script_frame(caller):
                    raise
                raise bridging_error(exc, caller) from exc
            finally:
                del caller

    wrapper.__host_call__ = True
    return wrapper
