"""Tree items: the vertices of a virtual tree.

A TreeItem is a named vertex that owns an ordered list of children and
may alias a real file through its ``entity``. Whether an item is a file
or a directory is not stored: it is decided by probing the disk on every
call, so an item flips to a directory if its backing file disappears.

Sibling names need not be unique. A name can carry a ``#n`` suffix to
pick the n-th (0-based) sibling with that base name::

    docs/
    ├── NAME          <- NAME#0
    └── NAME          <- NAME#1
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from vtree.tree.errors import (
    AlreadyExistsError,
    AmbiguousError,
    InvalidNameError,
    NotFoundError,
)

INVALID_CHARACTERS = '\\/#|"*?<>:'


def is_valid_item_name(name: str) -> bool:
    """True if ``name`` contains none of ``\\ / # | " * ? < > :``."""
    return not any(c in INVALID_CHARACTERS for c in name)


def split_nth_item(name: str) -> Tuple[str, int]:
    """Split ``"foo#2"`` into ``("foo", 2)``.

    Only the last ``#`` counts. Names without a numeric suffix return
    ``(name, -1)``.

    Examples:
        >>> split_nth_item("foo.txt#0")
        ('foo.txt', 0)
        >>> split_nth_item("2#4#2")
        ('2#4', 2)
        >>> split_nth_item("plain")
        ('plain', -1)
    """
    left, sep, right = name.rpartition("#")
    if sep and right.isdigit():
        return left, int(right)
    return name, -1


class TreeItem:
    """A vertex of the virtual tree.

    Attributes:
        name: Display name (not unique among siblings)
        desc: Optional free-form description
        entity: Optional path of the real file this item aliases
    """

    def __init__(
        self,
        name: str,
        children: Optional[List["TreeItem"]] = None,
        desc: Optional[str] = None,
        entity: Optional[str] = None,
    ):
        self.name = name
        self._children: List[TreeItem] = list(children or [])
        self.desc = desc
        self.entity = os.fspath(entity) if entity is not None else None

    @classmethod
    def new_file(cls, name: str, path: Union[str, Path]) -> "TreeItem":
        """Create a childless item aliasing ``path``."""
        return cls(name, entity=os.fspath(path))

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON document shape (recursive)."""
        return {
            "name": self.name,
            "children": [child.to_dict() for child in self._children],
            "desc": self.desc,
            "entity": self.entity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TreeItem":
        """Create from a JSON document. ``desc`` and ``entity`` may be absent."""
        return cls(
            name=data["name"],
            children=[cls.from_dict(child) for child in data.get("children", [])],
            desc=data.get("desc"),
            entity=data.get("entity"),
        )

    @classmethod
    def from_string(cls, string: str) -> "TreeItem":
        return cls.from_dict(json.loads(string))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TreeItem":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    # Classification

    def is_file(self) -> bool:
        """True if the entity currently exists as a regular file.

        This performs I/O on every call; the answer is never cached.
        """
        return self.entity is not None and os.path.isfile(self.entity)

    def is_dir(self) -> bool:
        return not self.is_file()

    def entity_path(self) -> Optional[str]:
        return self.entity

    # Children

    @property
    def children(self) -> List["TreeItem"]:
        """A copy of the child list, in insertion order."""
        return list(self._children)

    def iter_children(self) -> Iterator["TreeItem"]:
        return iter(self._children)

    def children_names(self) -> List[str]:
        return [child.name for child in self._children]

    def has(self, name: str) -> bool:
        """Exact-name membership; ``#n`` suffixes are not parsed."""
        return any(child.name == name for child in self._children)

    def has_dir(self, name: str) -> bool:
        return any(child.name == name and child.is_dir() for child in self._children)

    def get_child(self, name: str) -> "TreeItem":
        """Get a child by name.

        Without a ``#n`` suffix the first exact match wins. With one,
        the n-th match in insertion order is returned.

        Raises:
            NotFoundError: No child has this name
            AmbiguousError: Fewer than ``n + 1`` children have this name
        """
        base, nth = split_nth_item(name)
        if nth < 0:
            for child in self._children:
                if child.name == name:
                    return child
        else:
            matches = [child for child in self._children if child.name == base]
            if nth < len(matches):
                return matches[nth]
            if matches:
                raise AmbiguousError(base, len(matches))
        raise NotFoundError(f"No such file or directory: {name}")

    def get_child_dir(self, name: str) -> "TreeItem":
        """Get a child that is currently a directory.

        Without a suffix the first same-named directory is returned, so
        a file sibling sharing the name is skipped. With ``#n`` the n-th
        same-named sibling is selected and must be a directory.
        """
        base, nth = split_nth_item(name)
        if nth < 0:
            for child in self._children:
                if child.name == name and child.is_dir():
                    return child
        else:
            child = self.get_child(name)
            if child.is_dir():
                return child
        raise NotFoundError(f"No directory named {name} under {self.name}")

    def get_offspring(self, path: str) -> "TreeItem":
        """Walk a ``a/b/c`` path strictly downwards through children."""
        item = self
        for segment in path.split("/"):
            try:
                item = item.get_child(segment)
            except NotFoundError:
                raise NotFoundError(f"No such file or directory: {path}") from None
        return item

    # Mutation

    def add_item(self, item: "TreeItem") -> None:
        """Append ``item`` as the last child. Names are not checked."""
        self._children.append(item)

    def add_new_child(self, name: str, path: Union[str, Path]) -> "TreeItem":
        """Append a new child aliasing ``path`` and return it."""
        item = TreeItem.new_file(name, path)
        self.add_item(item)
        return item

    def make_directory(self, name: str) -> "TreeItem":
        """Append an empty directory child and return it.

        A file child with the same name does not block creation.

        Raises:
            AlreadyExistsError: A directory child named ``name`` exists
            InvalidNameError: ``name`` contains a reserved character
        """
        if self.has_dir(name):
            raise AlreadyExistsError(f"Directory {name} already exists.")
        if not name or not is_valid_item_name(name):
            raise InvalidNameError(
                f"Name {name!r} is not a valid directory name. "
                'Must not contain \\, /, #, |, ", *, ?, <, > or :'
            )
        child = TreeItem(name)
        self._children.append(child)
        return child

    def remove_child(self, name: str) -> "TreeItem":
        """Remove and return the first child named exactly ``name``.

        Duplicates are resolved by insertion order: the earliest match
        is removed and later ones are kept.
        """
        for index, child in enumerate(self._children):
            if child.name == name:
                return self._children.pop(index)
        raise NotFoundError(f"No such file or directory: {name}")

    def remove_item(self, item: "TreeItem") -> None:
        """Remove a specific child object (identity, not name)."""
        for index, child in enumerate(self._children):
            if child is item:
                del self._children[index]
                return
        raise NotFoundError(f"No such file or directory: {item.name}")

    def entities(self) -> List["TreeItem"]:
        """Collect descendants that carry an entity.

        Items with an entity are collected without descending into them;
        items without one are searched recursively.
        """
        found = []
        for child in self._children:
            if child.entity is not None:
                found.append(child)
            else:
                found.extend(child.entities())
        return found

    # Formatting

    def format(self) -> str:
        """Render the subtree as a box-drawn outline."""
        lines = [self.name]
        self._format_children(lines, "")
        return "\n".join(lines)

    def _format_children(self, lines: List[str], prefix: str) -> None:
        last = len(self._children) - 1
        for index, child in enumerate(self._children):
            is_last = index == last
            connector = "└── " if is_last else "├── "
            extension = "    " if is_last else "│   "
            lines.append(f"{prefix}{connector}{child.name}")
            child._format_children(lines, prefix + extension)

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self.name!r}, "
            f"children={len(self._children)}, entity={self.entity!r})"
        )
