"""
Wrapping engine.

Every public entry point funnels into ``_new``, which walks the error chain,
harvests stacks and metadata already attached to it, decides whether a
fresh capture is needed and removes redundant parent stacks.

Frame-skip contract: ``skipped_frames`` passed to ``_new`` counts the frames
between ``_new`` and the frame that should appear first in a fresh capture,
including the public entry point itself. Entry points must call ``_new``
directly so this count stays correct.
"""

import sys
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from stackerr.analyzers import remove_parents
from stackerr.models import Frame, Stack, Stacks
from stackerr.services.introspection import capture_stack, raw_stack_of, unwrap_error
from stackerr.stack_error import InPlaceEditError, StackError
from stackerr.utils.logging import get_logger

logger = get_logger(__name__)


def _as_stack(stack: Any) -> Stack:
    if isinstance(stack, Stack):
        return stack
    return Stack(tuple(stack))


def _new(
    err: Optional[BaseException],
    skipped_frames: int,
    add_stack_to_existing: bool,
    new_stacks: Sequence[Any] = (),
) -> Optional[StackError]:
    # Wrapping no error produces no error
    if err is None:
        return None
    if isinstance(err, InPlaceEditError):
        err = err.target

    all_stacks: List[Stack] = []
    all_fields: Dict[str, Any] = {}

    seen = set()
    unwrapped = err
    while unwrapped is not None and id(unwrapped) not in seen:
        seen.add(id(unwrapped))

        if isinstance(unwrapped, InPlaceEditError):
            unwrapped = unwrapped.target

        if isinstance(unwrapped, StackError):
            all_stacks.extend(unwrapped.stacks())
            for key, value in unwrapped.fields().items():
                # The walk starts at the outermost wrapper, which has key priority
                if key not in all_fields:
                    all_fields[key] = value
            # A StackError already absorbed everything beneath it
            break

        raw = raw_stack_of(unwrapped)
        if raw is not None and len(raw) > 0:
            all_stacks.append(raw)

        unwrapped = unwrap_error(unwrapped)

    if new_stacks:
        all_stacks = [_as_stack(stack) for stack in new_stacks] + all_stacks
    elif not all_stacks or add_stack_to_existing:
        # this function + the caller-declared skips
        all_stacks.insert(0, capture_stack(1 + skipped_frames))

    stacks = Stacks(all_stacks)
    if len(stacks) > 1:
        stacks = remove_parents(stacks)

    # Never nest a StackError inside another one
    if isinstance(err, StackError):
        logger.debug(f"Flattening already wrapped error: {err.error()}")
        return StackError(err.err, stacks, all_fields)

    return StackError(err, stacks, all_fields)


def wrap(err: Optional[BaseException]) -> Optional[StackError]:
    """
    Wrap an error into a StackError using the stack at the point of this call.

    Args:
        err: Error to wrap, may be None

    Returns:
        StackError, or None if ``err`` is None
    """
    return _new(err, 1, True)


def wrap_with_frame_skips(err: Optional[BaseException], skipped_frames: int) -> Optional[StackError]:
    """
    Wrap an error, ignoring the most recent ``skipped_frames`` frames of the stack.

    Useful for helpers that wrap errors on behalf of their caller.
    """
    return _new(err, 1 + skipped_frames, True)


def wrap_with_stack(
    err: Optional[BaseException], stack: Sequence[Frame], *stacks: Sequence[Frame]
) -> Optional[StackError]:
    """
    Wrap an error using the given stacks instead of capturing one.

    The given stacks take priority over any stacks already in the error chain.
    At least one stack is required; no live capture is taken.
    """
    return _new(err, 1, True, (stack,) + stacks)


def wrap_without_extra_stack(err: Optional[BaseException]) -> Optional[StackError]:
    """
    Wrap an error, capturing the current stack only if the error chain has none.
    """
    return _new(err, 1, False)


def wrap_with_frame_skips_without_extra_stack(
    err: Optional[BaseException], skipped_frames: int
) -> Optional[StackError]:
    """
    Wrap an error without adding a stack if one exists, otherwise capture
    the stack ignoring the most recent ``skipped_frames`` frames.
    """
    return _new(err, 1 + skipped_frames, False)


def from_recover(recovered: Any) -> Optional[StackError]:
    """
    Convert a recovered value into a StackError.

    Exceptions keep the stack of the point where they were raised; any other
    value becomes a plain Exception carrying its string form.

    Args:
        recovered: Caught exception or any other recovered value

    Returns:
        StackError, or None if nothing was recovered
    """
    if recovered is None:
        return None
    if isinstance(recovered, BaseException):
        return _new(recovered, 1, True)
    return _new(Exception(str(recovered)), 1, True)


@contextmanager
def recovering() -> Iterator[None]:
    """
    Re-raise any exception escaping the block as a StackError.

    Usage:
        with recovering():
            process()  # failures surface as StackError with their stacks

    KeyboardInterrupt and other non-Exception errors pass through unchanged.
    """
    try:
        yield
    except Exception as e:
        tb = e.__traceback__
        # gen.throw() puts this generator at the head of the traceback, whose
        # callers are contextlib's __exit__ and not the with-block's callers
        if tb is not None and tb.tb_frame is sys._getframe():
            e.__traceback__ = tb.tb_next
        # The traceback already runs from the raise point through the
        # with-block, so no extra stack is captured at this boundary
        raise _new(e, 2, False)


def errorf(message: str, *args: Any) -> StackError:
    """
    Create a new error with a %-interpolated message, wrapped with the
    caller's stack.
    """
    if args:
        message = message % args
    return _new(Exception(message), 1, True)
