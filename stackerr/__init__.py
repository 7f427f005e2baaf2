"""
Errors with captured call stacks and diagnostic metadata.

Wrap any exception to record where it happened, attach key-value fields,
and carry both through further wrapping without duplicating stacks.
"""

from stackerr.analyzers import distinct, is_parent_of, remove_parents
from stackerr.config import STACK_DIVIDER, Settings, settings
from stackerr.models import ErrorRecord, Frame, Stack, Stacks
from stackerr.services import (
    StackTracer,
    Unwrapper,
    capture_stack,
    parse_stacks,
    stack_trace,
    stack_trace_with_skipped_frames,
    unwrap_error,
)
from stackerr.stack_error import InPlaceEditError, StackError
from stackerr.wrapping import (
    errorf,
    from_recover,
    recovering,
    wrap,
    wrap_with_frame_skips,
    wrap_with_frame_skips_without_extra_stack,
    wrap_with_stack,
    wrap_without_extra_stack,
)

__version__ = "0.1.0"

__all__ = [
    # Models
    "Frame",
    "Stack",
    "Stacks",
    "ErrorRecord",
    # Wrapped error
    "StackError",
    "InPlaceEditError",
    # Wrapping
    "wrap",
    "wrap_with_frame_skips",
    "wrap_with_stack",
    "wrap_without_extra_stack",
    "wrap_with_frame_skips_without_extra_stack",
    "from_recover",
    "recovering",
    "errorf",
    # Stack analysis
    "is_parent_of",
    "remove_parents",
    "distinct",
    # Capture and parsing
    "StackTracer",
    "Unwrapper",
    "capture_stack",
    "stack_trace",
    "stack_trace_with_skipped_frames",
    "unwrap_error",
    "parse_stacks",
    # Configuration
    "STACK_DIVIDER",
    "Settings",
    "settings",
]
