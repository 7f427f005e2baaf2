"""Stack relationship analyzers package."""

from stackerr.analyzers.stack_analyzer import distinct, is_parent_of, remove_parents

__all__ = ["is_parent_of", "remove_parents", "distinct"]
