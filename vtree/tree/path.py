"""Path vectors: the cursor into a virtual tree."""

import re
from typing import Iterable, Iterator, List, Tuple

_SEPARATORS = re.compile(r"[/\\]")


class PathVector:
    """An immutable sequence of path segments.

    A PathVector names a position in the tree as the list of child
    names walked from the root. Every operation returns a new value.

    Example:
        >>> p = PathVector.from_string("a/b")
        >>> p.join_str("c").to_string()
        'a/b/c'
        >>> p.pops(5).to_string()
        ''
    """

    __slots__ = ("_segments",)

    def __init__(self, segments: Iterable[str] = ()):
        self._segments: Tuple[str, ...] = tuple(segments)

    @classmethod
    def from_string(cls, string: str) -> "PathVector":
        """Split on ``/`` and ``\\``, keeping empty segments."""
        return cls(_SEPARATORS.split(string))

    @property
    def segments(self) -> List[str]:
        return list(self._segments)

    def join_str(self, name: str) -> "PathVector":
        return PathVector(self._segments + (name,))

    def join_path(self, other: "PathVector") -> "PathVector":
        return PathVector(self._segments + other._segments)

    def pops(self, level: int) -> "PathVector":
        """Drop up to ``level`` trailing segments (clamped at the root)."""
        keep = max(len(self._segments) - max(level, 0), 0)
        return PathVector(self._segments[:keep])

    def to_string(self) -> str:
        return "/".join(self._segments)

    def is_root(self) -> bool:
        return not self._segments

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[str]:
        return iter(self._segments)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PathVector):
            return self._segments == other._segments
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._segments)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"PathVector({list(self._segments)!r})"
