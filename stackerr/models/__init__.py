"""Data models for captured call stacks and wrapped errors."""

from .error import ErrorRecord
from .stack import Frame, Stack, Stacks

__all__ = [
    # Stack models
    "Frame",
    "Stack",
    "Stacks",
    # Error models
    "ErrorRecord",
]
