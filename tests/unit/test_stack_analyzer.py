"""
Unit tests for stack relationship analysis.
"""

import pytest

from stackerr.analyzers import distinct, is_parent_of, remove_parents
from stackerr.models import Frame, Stack, Stacks


def _stack(*frames):
    return Stack(tuple(Frame(function=f, file=file, line=line) for f, file, line in frames))


@pytest.fixture
def parent():
    """Stack captured in f, called from main."""
    return _stack(("f", "a.go", 10), ("main", "a.go", 5))


@pytest.fixture
def child():
    """Stack captured in g, called from f, called from main."""
    return _stack(("g", "b.go", 20), ("f", "a.go", 10), ("main", "a.go", 5))


def test_is_parent_of_extended_path(parent, child):
    """Test that an outer capture on the same path is a parent."""
    assert is_parent_of(parent, child) is True
    assert is_parent_of(child, parent) is False


def test_is_parent_of_shorter_child_is_false(parent):
    """Test that a child with fewer frames is never a child."""
    assert is_parent_of(parent, _stack(("main", "a.go", 5))) is False


def test_is_parent_of_tolerates_later_line_in_innermost_frame(child):
    """Test that the parent may be captured later within its innermost function."""
    later = _stack(("f", "a.go", 14), ("main", "a.go", 5))
    earlier = _stack(("f", "a.go", 7), ("main", "a.go", 5))

    assert is_parent_of(later, child) is True
    assert is_parent_of(earlier, child) is False


def test_is_parent_of_requires_exact_outer_lines(child):
    """Test that outer call sites must match exactly."""
    candidate = _stack(("f", "a.go", 10), ("main", "a.go", 6))

    assert is_parent_of(candidate, child) is False


def test_is_parent_of_requires_matching_function_and_file(child):
    """Test that diverging functions or files mean unrelated stacks."""
    other_function = _stack(("h", "a.go", 10), ("main", "a.go", 5))
    other_file = _stack(("f", "c.go", 10), ("main", "a.go", 5))

    assert is_parent_of(other_function, child) is False
    assert is_parent_of(other_file, child) is False


def test_is_parent_of_mutual_only_when_equal(parent):
    """Test that mutual parenthood implies frame-for-frame equality."""
    same = _stack(("f", "a.go", 10), ("main", "a.go", 5))
    later_line = _stack(("f", "a.go", 11), ("main", "a.go", 5))

    assert is_parent_of(parent, same) and is_parent_of(same, parent)
    assert parent == same
    assert is_parent_of(later_line, parent) is True
    assert is_parent_of(parent, later_line) is False


def test_remove_parents_drops_newer_parent(parent, child):
    """Test that a newer parent of an older stack is dropped."""
    result = remove_parents(Stacks([parent, child]))

    assert list(result) == [child]


def test_remove_parents_keeps_older_parent(parent, child):
    """Test that only later-ordered stacks count as children."""
    result = remove_parents(Stacks([child, parent]))

    assert list(result) == [child, parent]


def test_remove_parents_preserves_order_of_unrelated_stacks(parent, child):
    """Test that surviving stacks keep their relative order."""
    sibling = _stack(("k", "k.go", 1), ("main", "a.go", 9))
    stacks = Stacks([sibling, parent, child])

    result = remove_parents(stacks)

    assert list(result) == [sibling, child]


def test_remove_parents_is_idempotent(parent, child):
    """Test that removing parents twice gives the same result as once."""
    sibling = _stack(("k", "k.go", 1), ("main", "a.go", 9))
    stacks = Stacks([parent, sibling, child, parent])

    once = remove_parents(stacks)
    twice = remove_parents(once)

    assert list(once) == list(twice)
    assert len(once) <= len(stacks)
    assert all(stack in list(stacks) for stack in once)


def test_remove_parents_empty():
    """Test removing parents from an empty set."""
    assert len(remove_parents(Stacks([]))) == 0


def test_distinct_removes_duplicates(parent, child):
    """Test that exact duplicates are removed, first occurrence wins."""
    duplicate = _stack(("f", "a.go", 10), ("main", "a.go", 5))

    result = distinct(Stacks([child, parent, duplicate, child]))

    assert len(result) == 2
    assert result[0] is child
    assert result[1] is parent


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
