"""Structured encoding model for wrapped errors."""

from typing import Any, Dict, List

from pydantic import BaseModel

from .stack import Frame


class ErrorRecord(BaseModel):
    """Serialized form of a StackError: message text, stacks and metadata."""

    err: str
    stack_traces: List[List[Frame]] = []
    meta_fields: Dict[str, Any] = {}
