"""The tree model: a root item plus a cursor into it.

TreeModel owns the whole item graph and the current position. All path
arguments typed by a user go through :meth:`TreeModel.resolve_virtual_path`:

- ``~`` at the start means "from the root"; anything else is relative
  to the current position
- ``/`` and ``\\`` both separate segments
- empty segments, ``.`` and ``~`` are dropped
- ``..`` pops one segment and stops at the root
"""

import json
import logging
import os
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from vtree.system import open_with_default_app, run_command
from vtree.tree.entity import is_cwd_relative, resolve_entity_path, unique_backing_path
from vtree.tree.errors import (
    AlreadyExistsError,
    InvalidNameError,
    NotAFileError,
    NotFoundError,
    TreeError,
)
from vtree.tree.item import TreeItem, is_valid_item_name, split_nth_item
from vtree.tree.path import PathVector

logger = logging.getLogger(__name__)

_DROPPED_SEGMENTS = ("", ".", "~")


class TreeModel:
    """A virtual tree and the current working position.

    Attributes:
        root: Root item; owns every other item
        path: Current position as segment names from the root

    Usage:
        >>> tree = TreeModel.from_file(Path(".vtree/trees/default.json"))
        >>> tree.make_directory("papers")
        >>> tree.move_by_string("papers")
        >>> tree.add_alias(None, "/home/me/report.pdf")
        >>> tree.ls_simple()
        'report.pdf'
    """

    def __init__(self, root: TreeItem, path: Optional[PathVector] = None):
        self.root = root
        self.path = path if path is not None else PathVector()

    # Persistence

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TreeModel":
        logger.debug(f"Loading tree from {path}")
        return cls(TreeItem.from_file(path))

    def to_file(self, path: Union[str, Path]) -> None:
        """Overwrite ``path`` with the whole tree as JSON."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.root.to_dict(), f, indent=2, ensure_ascii=False)
        logger.debug(f"Saved tree {self.root.name!r} to {path}")

    # Resolution

    def resolve_virtual_path(self, path_str: str) -> List[str]:
        """Turn a user-typed path into a candidate segment list.

        The result is not checked for existence.
        """
        segments = [] if path_str.startswith("~") else self.path.segments
        for segment in path_str.replace("\\", "/").split("/"):
            if segment in _DROPPED_SEGMENTS:
                continue
            if segment == "..":
                if segments:
                    segments.pop()
            else:
                segments.append(segment)
        return segments

    def item_at(self, segments: Sequence[str]) -> TreeItem:
        """Find the item at ``segments``.

        Every segment but the last must be a directory, walked the same
        way as :meth:`dir_item_at`, so a file sibling sharing a directory's
        name never hides it. The last segment may be a file or a directory.
        """
        if not segments:
            return self.root
        return self.dir_item_at(segments[:-1]).get_child(segments[-1])

    def dir_item_at(self, segments: Sequence[str]) -> TreeItem:
        """Like :meth:`item_at` but every step must be a directory."""
        item = self.root
        for name in segments:
            item = item.get_child_dir(name)
        return item

    def current_item(self) -> TreeItem:
        return self.dir_item_at(self.path.segments)

    def _item_for(self, path_str: str) -> TreeItem:
        # "", ".", ".." and "~" (or a trailing separator) name a directory position
        tokens = [t for t in path_str.replace("\\", "/").split("/") if t]
        segments = self.resolve_virtual_path(path_str)
        if not tokens or tokens[-1] in (".", "..", "~") or path_str.endswith(("/", "\\")):
            return self.dir_item_at(segments)
        return self.item_at(segments)

    def _split_parent(self, path_str: str) -> Tuple[List[str], str]:
        segments = self.resolve_virtual_path(path_str)
        if not segments:
            raise InvalidNameError(f"{path_str!r} does not name an item below the root")
        return segments[:-1], segments[-1]

    # Navigation

    def set_path(self, path: PathVector) -> None:
        self.dir_item_at(path.segments)
        self.path = path

    def move_forward(self, name: str) -> None:
        """Enter the child directory ``name``."""
        self.set_path(self.path.join_str(name))

    def move_backward(self, level: int = 1) -> None:
        """Go up ``level`` directories, stopping at the root."""
        self.path = self.path.pops(level)

    def move_by_string(self, path_str: str) -> None:
        """Walk ``path_str`` one segment at a time, as repeated ``cd``.

        Only ``..`` is special; other segments must name child
        directories. On failure the position is left unchanged.
        """
        saved = self.path
        try:
            for segment in PathVector.from_string(path_str):
                if not segment:
                    continue
                if segment == "..":
                    self.move_backward(1)
                else:
                    self.move_forward(segment)
        except TreeError:
            self.path = saved
            raise

    def move_to_home(self) -> None:
        self.path = PathVector()

    def pwd(self) -> str:
        return self.path.to_string()

    def as_prefix(self) -> str:
        return f"/[{self.root.name}]/{self.pwd()} > "

    def _clamp_path(self) -> None:
        # The current position may have been removed from under us.
        path = self.path
        while True:
            try:
                self.dir_item_at(path.segments)
                break
            except TreeError:
                path = path.pops(1)
        self.path = path

    # Queries

    def _dir_for(self, path_str: Optional[str]) -> TreeItem:
        if path_str is None:
            return self.current_item()
        return self.dir_item_at(self.resolve_virtual_path(path_str))

    def ls_simple(self, path_str: Optional[str] = None) -> str:
        """Child names of a directory, space separated."""
        return " ".join(self._dir_for(path_str).children_names())

    def ls_with_desc(self, path_str: Optional[str] = None) -> str:
        """One ``name  description`` line per child, names right-aligned."""
        children = self._dir_for(path_str).children
        if not children:
            return ""
        width = max(len(child.name) for child in children)
        lines = [f"{child.name:>{width}}  {child.desc or ''}".rstrip() for child in children]
        return "\n".join(lines)

    def tree_string(self, path_str: Optional[str] = None) -> str:
        """Outline of the current directory or of a descendant of it."""
        item = self.current_item()
        if path_str:
            item = item.get_offspring(path_str)
        return item.format()

    def describe(self, path_str: Optional[str] = None, text: Optional[str] = None) -> Optional[str]:
        """Return an item's description, replacing it first if ``text`` is given."""
        if path_str is None:
            item = self.current_item()
        else:
            item = self._item_for(path_str)
        if text is not None:
            item.desc = text
        return item.desc

    def complete(self, partial: str) -> List[str]:
        """Completion candidates for a partially typed path."""
        if "/" in partial:
            dir_part, file_part = partial.rsplit("/", 1)
            prefix = dir_part + "/"
        else:
            dir_part, file_part, prefix = "", partial, ""
        try:
            directory = self._dir_for(dir_part or None)
        except TreeError:
            return []
        candidates = []
        for child in directory.iter_children():
            if child.name.startswith(file_part):
                suffix = "/" if child.is_dir() else ""
                candidates.append(f"{prefix}{child.name}{suffix}")
        return candidates

    # Mutation

    def make_directory(self, path_str: str) -> TreeItem:
        """Create a directory under its parent path.

        If the parent path does not resolve, the directory is created in
        the current directory instead.
        """
        parents, name = self._split_parent(path_str)
        try:
            parent = self.dir_item_at(parents)
        except TreeError:
            logger.debug(f"mkdir: {'/'.join(parents)} not found, using current directory")
            parent = self.current_item()
        item = parent.make_directory(name)
        logger.debug(f"mkdir {name} under {parent.name}")
        return item

    def remove_child(self, path_str: str) -> TreeItem:
        """Detach an item from the tree and return it.

        A plain name removes the first sibling with that exact name;
        ``name#n`` removes exactly the n-th one. Backing files are left
        alone.
        """
        parents, name = self._split_parent(path_str)
        parent = self.dir_item_at(parents)
        if split_nth_item(name)[1] >= 0:
            removed = parent.get_child(name)
            parent.remove_item(removed)
        else:
            removed = parent.remove_child(name)
        logger.debug(f"rm {'/'.join(parents + [name])}")
        self._clamp_path()
        return removed

    def create_new_file(self, path_str: str, candidate: Union[str, "os.PathLike[str]"]) -> TreeItem:
        """Create an empty backing file and a tree item pointing at it.

        Args:
            path_str: Virtual path of the new item
            candidate: Desired backing path; ``stem-N.ext`` is used instead,
                with the first N that does not exist on disk

        Raises:
            AlreadyExistsError: ``path_str`` already names an item
        """
        parents, name = self._split_parent(path_str)
        try:
            self.item_at(parents + [name])
        except TreeError:
            pass
        else:
            raise AlreadyExistsError(f"{path_str} already exists.")
        if not is_valid_item_name(name):
            raise InvalidNameError(f"Name {name!r} is not a valid file name.")
        parent = self.dir_item_at(parents)

        backing = unique_backing_path(candidate)
        with open(backing, "x"):
            pass
        logger.debug(f"Created backing file {backing} for {name}")
        return parent.add_new_child(name, backing)

    def add_alias(
        self,
        name: Optional[str],
        real_path: Union[str, "os.PathLike[str]"],
    ) -> TreeItem:
        """Add an item that points at an existing file without copying it.

        Args:
            name: Virtual destination. ``None`` puts the alias in the
                current directory under the file's base name; an existing
                directory puts it inside that directory under the base name.
            real_path: File to alias, stored verbatim
        """
        real = os.fspath(real_path)
        if not os.path.exists(real):
            raise NotFoundError(f"No such file or directory: {real}")
        basename = os.path.basename(os.path.normpath(real))

        if name is None:
            parents, item_name = self.path.segments, basename
        else:
            segments = self.resolve_virtual_path(name)
            try:
                self.dir_item_at(segments)
                parents, item_name = segments, basename
            except TreeError:
                parents, item_name = segments[:-1], segments[-1]

        if not is_valid_item_name(item_name):
            raise InvalidNameError(f"Name {item_name!r} is not a valid file name.")
        parent = self.dir_item_at(parents)
        if parent.has(item_name):
            raise AlreadyExistsError(f"{item_name} already exists.")
        logger.debug(f"Alias {item_name} -> {real}")
        return parent.add_new_child(item_name, real)

    # Entities

    def resolve_file(self, path_str: str) -> Tuple[TreeItem, str]:
        """Find a file item and the absolute path of its entity."""
        item = self._item_for(path_str)
        if not item.is_file():
            raise NotAFileError(f"Not a file: {path_str}")
        return item, resolve_entity_path(item.entity)

    def read_file(self, path_str: str) -> bytes:
        _, real = self.resolve_file(path_str)
        with open(real, "rb") as f:
            return f.read()

    def open_file(self, path_str: str, opener: Optional[Callable[[str], None]] = None) -> str:
        """Hand a file's real path to ``opener`` (the desktop default app)."""
        _, real = self.resolve_file(path_str)
        (opener or open_with_default_app)(real)
        return real

    def resolve_command_args(self, args: Sequence[str]) -> List[str]:
        """Replace virtual names in ``args[1:]`` with real paths.

        Arguments naming an item with an entity become the entity's
        absolute path. Other arguments starting with ``.`` or ``/`` are
        made absolute; the rest pass through. ``args[0]`` is the program
        and is never rewritten.
        """
        resolved = list(args[:1])
        for arg in args[1:]:
            try:
                item = self._item_for(arg)
            except TreeError:
                item = None
            if item is not None and item.entity is not None:
                resolved.append(resolve_entity_path(item.entity))
            elif is_cwd_relative(arg):
                resolved.append(resolve_entity_path(arg))
            else:
                resolved.append(arg)
        return resolved

    def call_command(
        self,
        args: Sequence[str],
        runner: Optional[Callable[[Sequence[str]], int]] = None,
    ) -> int:
        """Run an external program on virtual paths; returns its exit status."""
        if not args:
            raise ValueError("call: missing command")
        argv = self.resolve_command_args(args)
        return (runner or run_command)(argv)
