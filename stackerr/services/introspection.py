"""
Interpreter introspection for stack capture and error-chain walking.

This service provides:
- Live call-stack capture with frame skipping
- Conversion of a raised exception's traceback into a Stack
- Protocols for foreign errors that expose a wrapped error or raw frames
- Generic "error this wraps" resolution following Python's chaining rules
"""

import itertools
import sys
import traceback
from types import FrameType, TracebackType
from typing import Any, Iterable, Optional, Protocol, runtime_checkable

from stackerr.config import settings
from stackerr.models import Frame, Stack


@runtime_checkable
class Unwrapper(Protocol):
    """An error that can name the error it wraps."""

    def unwrap(self) -> Optional[BaseException]:
        ...


@runtime_checkable
class StackTracer(Protocol):
    """
    An error carrying its own raw stack, innermost frame first.

    Items may be Frame objects, ``traceback.FrameSummary`` objects or
    ``(function, file, line)`` triples.
    """

    def stack_trace(self) -> Iterable[Any]:
        ...


def function_name(frame: FrameType) -> str:
    """Module-qualified name of the function executing in ``frame``."""
    code = frame.f_code
    module = frame.f_globals.get("__name__", "")
    qualname = getattr(code, "co_qualname", code.co_name)
    return f"{module}.{qualname}" if module else qualname


def to_frame(frame: FrameType, lineno: Optional[int]) -> Frame:
    return Frame(
        function=function_name(frame),
        file=frame.f_code.co_filename,
        line=max(0, lineno or 0),
    )


def capture_stack(skipped_frames: int = 0, max_depth: Optional[int] = None) -> Stack:
    """
    Capture the current call stack.

    The first frame is the caller of this function, unless more frames are
    skipped.

    Args:
        skipped_frames: Number of additional innermost frames to skip
        max_depth: Maximum number of frames to record. Defaults to the
            configured ``max_stack_depth``.

    Returns:
        Stack ordered innermost first, empty if more frames were skipped than exist
    """
    if max_depth is None:
        max_depth = settings.max_stack_depth

    try:
        # this function + requested skips
        start = sys._getframe(1 + skipped_frames)
    except ValueError:
        return Stack(())

    walked = itertools.islice(traceback.walk_stack(start), max_depth)
    return Stack(tuple(to_frame(frame, lineno) for frame, lineno in walked))


def stack_trace() -> Stack:
    """Get the current stack, starting at the caller."""
    return capture_stack(1)


def stack_trace_with_skipped_frames(skipped_frames: int) -> Stack:
    """Get the current stack, with the most recent ``skipped_frames`` frames skipped."""
    return capture_stack(1 + skipped_frames)


def stack_from_traceback(tb: TracebackType, max_depth: Optional[int] = None) -> Stack:
    """
    Convert a traceback into a full Stack.

    A traceback only covers the frames between the handler and the raise
    point, so the callers of the handling frame are added to complete the
    path.

    Args:
        tb: Traceback of a raised exception
        max_depth: Maximum number of frames to record

    Returns:
        Stack ordered innermost (raise point) first
    """
    if max_depth is None:
        max_depth = settings.max_stack_depth

    frames = [to_frame(frame, lineno) for frame, lineno in traceback.walk_tb(tb)]
    frames.reverse()

    caller = tb.tb_frame.f_back
    if caller is not None:
        frames.extend(to_frame(frame, lineno) for frame, lineno in traceback.walk_stack(caller))

    return Stack(tuple(frames[:max_depth]))


def coerce_frame(item: Any) -> Frame:
    """Convert a foreign frame record into a Frame."""
    if isinstance(item, Frame):
        return item
    if isinstance(item, traceback.FrameSummary):
        return Frame(function=item.name, file=item.filename, line=max(0, item.lineno or 0))
    function, file, line = item
    # Frame lines are never negative; unknown lines become 0
    return Frame(function=str(function), file=str(file), line=max(0, int(line or 0)))


def raw_stack_of(err: Any) -> Optional[Stack]:
    """
    Expose the raw call stack a foreign error carries, if any.

    Args:
        err: Any error in a chain

    Returns:
        Stack from ``stack_trace()`` or from the raised traceback, or None
    """
    if isinstance(err, StackTracer):
        return Stack(tuple(coerce_frame(item) for item in err.stack_trace()))

    tb = getattr(err, "__traceback__", None)
    if tb is not None:
        return stack_from_traceback(tb)

    return None


def unwrap_error(err: Any) -> Optional[BaseException]:
    """
    Return the error that ``err`` wraps, or None.

    An explicit ``unwrap()`` wins; otherwise the explicit ``__cause__`` is
    followed, then the implicit ``__context__`` unless it was suppressed.
    """
    if isinstance(err, Unwrapper):
        return err.unwrap()

    cause = getattr(err, "__cause__", None)
    if cause is not None:
        return cause
    if getattr(err, "__suppress_context__", False):
        return None
    return getattr(err, "__context__", None)
