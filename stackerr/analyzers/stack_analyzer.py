"""
Stack relationship analysis.

This module decides when one captured stack is a redundant ancestor of
another and removes such redundancy from a set of stacks:
- is_parent_of: whether a stack was captured at an outer point of the same call path
- remove_parents: drop stacks that are parents of a later stack in the set
- distinct: drop exact duplicates
"""

import logging

from stackerr.models import Stack, Stacks

logger = logging.getLogger(__name__)


def is_parent_of(parent: Stack, child: Stack) -> bool:
    """
    Check whether ``child``'s stack entirely includes ``parent``'s path.

    Frames are compared from the outer end inward. Every compared frame must
    agree on function and file; all but the innermost frame of ``parent``
    must also agree on line. The innermost frame of ``parent`` may sit at the
    same or a later line than the matching frame of ``child``.

    Args:
        parent: Candidate ancestor stack
        child: Candidate descendant stack

    Returns:
        True if ``parent`` carries no information that ``child`` lacks
    """
    # A shorter stack can't contain the parent's whole path
    if len(child) < len(parent):
        return False

    for offset in range(1, len(parent) + 1):
        p_frame = parent[len(parent) - offset]
        c_frame = child[len(child) - offset]

        # Diverging frames mean siblings/cousins, not parent/child
        if p_frame.function != c_frame.function or p_frame.file != c_frame.file:
            return False
        if p_frame.line < c_frame.line:
            return False
        if offset != len(parent) and p_frame.line != c_frame.line:
            return False

    return True


def remove_parents(stacks: Stacks) -> Stacks:
    """
    Remove every stack that is a parent of at least one later stack.

    Stacks are ordered newest to oldest. A newer stack whose path is
    contained in an older one was captured by a calling function while
    wrapping, so it adds nothing.

    Args:
        stacks: Stacks to filter

    Returns:
        Surviving stacks, in their original relative order
    """
    kept = []
    for i, stack in enumerate(stacks):
        has_child = False
        for later in stacks[i + 1:]:
            if is_parent_of(stack, later):
                has_child = True
                break
        if not has_child:
            kept.append(stack)

    if len(kept) != len(stacks):
        logger.debug(f"Removed {len(stacks) - len(kept)} parent stack(s)")
    return Stacks(kept)


def distinct(stacks: Stacks) -> Stacks:
    """
    Remove duplicate stacks, keeping the first occurrence.

    Stacks are compared by their formatted text, so stacks that only differ
    in trimmed runtime frames count as duplicates.
    """
    seen = set()
    unique = []
    for stack in stacks:
        key = stack.format()
        if key not in seen:
            seen.add(key)
            unique.append(stack)
    return Stacks(unique)
