"""
Wrapped error value carrying call stacks and metadata.

A StackError is treated as an immutable value: With-style mutators return a
modified copy. Direct mutation is only available through the InPlaceEditError
view returned by ``StackError.in_place()``.
"""

import json
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from stackerr.models import ErrorRecord, Stacks


class StackError(Exception):
    """An error paired with its captured stacks and metadata fields."""

    def __init__(
        self,
        err: BaseException,
        stack_traces: Optional[Stacks] = None,
        meta_fields: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize a wrapped error.

        Prefer the ``wrap*`` functions, which merge existing stacks and
        metadata from the error chain instead of starting fresh.

        Args:
            err: The original error being described
            stack_traces: Stacks ordered from most recent to oldest
            meta_fields: Metadata key-value pairs

        Raises:
            TypeError: If ``err`` is not an exception
        """
        if not isinstance(err, BaseException):
            raise TypeError(f"StackError can only wrap exceptions, got {type(err).__name__}")
        super().__init__(err)
        self._err = err
        self._stack_traces = stack_traces if stack_traces is not None else Stacks([])
        self._meta_fields = meta_fields if meta_fields is not None else {}
        self.__cause__ = err

    def __str__(self) -> str:
        return self.error()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._err!r})"

    def __reduce__(self):
        return (type(self), (self._err, self._stack_traces, self._meta_fields))

    @property
    def err(self) -> BaseException:
        """The wrapped original error."""
        return self._err

    def _clone(self) -> "StackError":
        return type(self)(self._err, self._stack_traces.copy_stacks(), dict(self._meta_fields))

    def error(self) -> str:
        """Message of the wrapped error."""
        return str(self._err)

    def error_with_stack(self) -> str:
        """Message of the wrapped error with the formatted stacks appended."""
        return self.error() + "\n" + self.format_stacks()

    def stacks(self) -> Stacks:
        """All stacks of this error, ordered from most recent to oldest."""
        return self._stack_traces

    def format_stacks(self) -> str:
        return self._stack_traces.format()

    def format_stacks_json(self) -> str:
        return self._stack_traces.format_json()

    def unwrap(self) -> BaseException:
        """Return the error that this StackError is wrapping."""
        return self._err

    def fields(self) -> Mapping[str, Any]:
        """Read-only view of the metadata key-value pairs of this error."""
        return MappingProxyType(self._meta_fields)

    def with_fields(self, key_value_pairs: Mapping[str, Any]) -> "StackError":
        """
        Return a copy with key-value pairs added.

        Existing pairs with the same key are overwritten in the copy; this
        error is left untouched.

        Args:
            key_value_pairs: Metadata to add

        Returns:
            New StackError sharing the wrapped error and stacks
        """
        clone = self._clone()
        clone._meta_fields.update(key_value_pairs)
        return clone

    def with_single(self, key: str, value: Any) -> "StackError":
        """Return a copy with a single key-value pair added."""
        clone = self._clone()
        clone._meta_fields[key] = value
        return clone

    def in_place(self) -> "InPlaceEditError":
        """Opt in to editing this instance directly instead of cloning it."""
        return InPlaceEditError(self)

    def to_record(self) -> ErrorRecord:
        return ErrorRecord(
            err=self.error(),
            stack_traces=[list(stack.trim()) for stack in self._stack_traces],
            meta_fields=dict(self._meta_fields),
        )

    def to_json(self) -> str:
        """
        Encode the message, stacks and metadata as JSON.

        Metadata values that JSON can't represent are encoded as strings.
        """
        return json.dumps(self.to_record().model_dump(), default=str)

    @classmethod
    def from_record(cls, record: ErrorRecord) -> "StackError":
        return cls(
            Exception(record.err),
            Stacks.from_frames(record.stack_traces),
            dict(record.meta_fields),
        )

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "StackError":
        """
        Decode a StackError produced by ``to_json``.

        Only the message text of the original error survives: the decoded
        error wraps a plain Exception.

        Raises:
            pydantic.ValidationError: If the data is not an encoded StackError
        """
        return cls.from_record(ErrorRecord.model_validate_json(data))


class InPlaceEditError:
    """
    Privileged view of a StackError that edits it without cloning.

    Reads fall through to the underlying error, and wrapping the view wraps
    the underlying error. Callers must own the instance exclusively; no
    locking is provided.
    """

    def __init__(self, error: StackError):
        self._error = error

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._error, name)

    @property
    def target(self) -> StackError:
        """The StackError being edited."""
        return self._error

    def with_in_place(self, key_value_pairs: Mapping[str, Any]) -> None:
        """Add key-value pairs to the existing error."""
        self._error._meta_fields.update(key_value_pairs)

    def set_error(self, err: BaseException) -> None:
        """Replace the wrapped error."""
        if not isinstance(err, BaseException):
            raise TypeError(f"StackError can only wrap exceptions, got {type(err).__name__}")
        self._error._err = err
        self._error.args = (err,)
        self._error.__cause__ = err

    def set_stacks(self, stacks: Stacks) -> None:
        """Replace the stacks."""
        self._error._stack_traces = stacks
