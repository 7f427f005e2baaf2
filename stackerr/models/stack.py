"""Call-stack snapshot data models."""

import json
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, RootModel

from stackerr.config import settings


class Frame(BaseModel):
    """A single recorded call site."""

    model_config = ConfigDict(frozen=True)

    function: str = ""
    file: str = ""
    line: int = Field(default=0, ge=0)

    def format(self) -> str:
        """Render the frame as ``function`` followed by an indented ``file:line``."""
        return f"{self.function}\n\t{self.file}:{self.line}"


class Stack(RootModel[Tuple[Frame, ...]]):
    """
    Snapshot of frames from one capture point.

    Index 0 is the innermost (most recent) frame, increasing indexes are
    older callers.
    """

    model_config = ConfigDict(frozen=True)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Stack(self.root[index])
        return self.root[index]

    def trim(self, prefixes: Optional[Sequence[str]] = None) -> "Stack":
        """
        Drop trailing frames that belong to interpreter dispatch machinery.

        Args:
            prefixes: Function-name prefixes identifying runtime frames.
                Defaults to the configured ``runtime_frame_prefixes``.

        Returns:
            Stack without the runtime frames at its outer end
        """
        if prefixes is None:
            prefixes = settings.runtime_frame_prefixes
        prefixes = tuple(prefixes)

        last = len(self.root) - 1
        while last >= 0 and prefixes and self.root[last].function.startswith(prefixes):
            last -= 1
        return Stack(self.root[:last + 1])

    def format(self) -> str:
        """Format the stack into a human-readable string."""
        return "\n".join(frame.format() for frame in self.trim())

    def to_records(self) -> List[Dict[str, Any]]:
        """Structured encoding of the trimmed stack."""
        return [frame.model_dump() for frame in self.trim()]

    def format_json(self) -> str:
        """Format the stack into a JSON string."""
        return json.dumps(self.to_records())


class Stacks(RootModel[List[Stack]]):
    """Ordered collection of stacks, most recently captured first."""

    def __iter__(self) -> Iterator[Stack]:
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Stacks(self.root[index])
        return self.root[index]

    @classmethod
    def from_frames(cls, stacks: Sequence[Sequence[Frame]]) -> "Stacks":
        """Build a set of stacks from nested sequences of frames."""
        return cls([Stack(tuple(frames)) for frames in stacks])

    def copy_stacks(self) -> "Stacks":
        """Shallow copy; stacks themselves are immutable and shared."""
        return Stacks(list(self.root))

    def format(self, divider: Optional[str] = None) -> str:
        """
        Format the stacks into a human-readable string.

        Each stack is enclosed between two divider lines and stacks are
        separated by a blank line.

        Args:
            divider: Separator line. Defaults to the configured ``stack_divider``.

        Returns:
            Human-readable rendering of every stack, in order
        """
        if divider is None:
            divider = settings.stack_divider
        return "\n\n".join(f"{divider}\n{stack.format()}\n{divider}" for stack in self.root)

    def to_records(self) -> List[List[Dict[str, Any]]]:
        return [stack.to_records() for stack in self.root]

    def format_json(self) -> str:
        """Format the stacks into a JSON string."""
        return json.dumps(self.to_records())
