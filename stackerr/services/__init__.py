"""Stack capture and parsing services package."""

from stackerr.services.introspection import (
    StackTracer,
    Unwrapper,
    capture_stack,
    raw_stack_of,
    stack_from_traceback,
    stack_trace,
    stack_trace_with_skipped_frames,
    unwrap_error,
)
from stackerr.services.parser import parse_stacks

__all__ = [
    'StackTracer',
    'Unwrapper',
    'capture_stack',
    'raw_stack_of',
    'stack_from_traceback',
    'stack_trace',
    'stack_trace_with_skipped_frames',
    'unwrap_error',
    'parse_stacks',
]
