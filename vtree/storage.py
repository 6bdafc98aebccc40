"""On-disk layout of a vtree workspace.

    <base>/.vtree/
    ├── trees/            # one <name>.json document per virtual root
    ├── virtual-files/    # backing files created by ``touch``
    └── history           # REPL history

Items whose entity lives under ``virtual-files/`` are owned by vtree and
may be deleted together with the item; every other entity is only
referenced.
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from vtree.tree import InvalidNameError, TreeItem, TreeModel, is_valid_item_name
from vtree.tree.entity import resolve_entity_path

logger = logging.getLogger(__name__)

VTREE_DIR = ".vtree"
TREES_DIR = "trees"
VIRTUAL_FILES_DIR = "virtual-files"
HISTORY_FILE = "history"


class StorageLayout:
    """Locate and manage the ``.vtree`` directory of a workspace.

    Args:
        base: Directory that contains (or will contain) ``.vtree``;
            defaults to the current working directory
    """

    def __init__(self, base: Optional[Union[str, Path]] = None):
        self.base = Path(base if base is not None else Path.cwd()).resolve()

    @property
    def root(self) -> Path:
        return self.base / VTREE_DIR

    @property
    def trees_dir(self) -> Path:
        return self.root / TREES_DIR

    @property
    def virtual_files_dir(self) -> Path:
        return self.root / VIRTUAL_FILES_DIR

    @property
    def history_file(self) -> Path:
        return self.root / HISTORY_FILE

    def is_initialized(self) -> bool:
        return self.root.is_dir()

    def require_initialized(self) -> None:
        if not self.is_initialized():
            raise FileNotFoundError("vtree is not initialized. Please run `vtree init` first.")

    def init(self) -> Path:
        """Create the ``.vtree`` directories that are missing."""
        for directory in (self.root, self.trees_dir, self.virtual_files_dir):
            directory.mkdir(exist_ok=True)
        logger.debug(f"Initialized vtree at {self.root}")
        return self.root

    # Documents

    def tree_path(self, name: str) -> Path:
        self.require_initialized()
        return self.trees_dir / f"{name}.json"

    def new_tree(self, name: str = "default", desc: Optional[str] = None) -> Path:
        """Write an empty document for a new virtual root.

        Raises:
            FileExistsError: A root with this name already exists
            InvalidNameError: ``name`` contains a reserved character
        """
        if not name or not is_valid_item_name(name):
            raise InvalidNameError(f"Name {name!r} is not a valid tree name.")
        path = self.tree_path(name)
        if path.exists():
            raise FileExistsError(f"Virtual directory {name} already exists.")
        root = TreeItem(name, desc=desc)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(root.to_dict(), f, indent=2, ensure_ascii=False)
        logger.debug(f"Created {path}")
        return path

    def load_tree(self, name: str) -> TreeModel:
        path = self.tree_path(name)
        if not path.exists():
            raise FileNotFoundError(f"Virtual directory {name} does not exist.")
        return TreeModel.from_file(path)

    def list_trees(self) -> List[TreeItem]:
        """Root items of every document, ordered by file name."""
        self.require_initialized()
        return [TreeItem.from_file(path) for path in sorted(self.trees_dir.glob("*.json"))]

    def remove_tree(self, name: str, purge: bool = True) -> List[str]:
        """Delete a root's document.

        Args:
            name: Root name
            purge: Also delete the private backing files it references

        Returns:
            Backing files that were deleted
        """
        path = self.tree_path(name)
        if not path.exists():
            raise FileNotFoundError(f"Virtual directory {name} does not exist.")
        deleted = []
        if purge:
            deleted = self.delete_private_files(TreeItem.from_file(path).entities())
        path.unlink()
        logger.debug(f"Removed {path}")
        return deleted

    # Private backing files

    def virtual_file_candidate(self, name: str) -> str:
        """Desired backing path for a new file called ``name``.

        Relative (``./.vtree/virtual-files/<name>``) when the workspace
        is the current directory, so documents stay relocatable.
        """
        if self.base == Path.cwd().resolve():
            return os.path.join(".", VTREE_DIR, VIRTUAL_FILES_DIR, name)
        return str(self.virtual_files_dir / name)

    def is_private(self, entity: Optional[str]) -> bool:
        """True if ``entity`` lies inside ``virtual-files/``."""
        if entity is None:
            return False
        real = Path(os.path.realpath(resolve_entity_path(entity)))
        private = Path(os.path.realpath(self.virtual_files_dir))
        return private in real.parents

    def delete_private_files(self, items: List[TreeItem]) -> List[str]:
        """Delete the backing files of ``items`` that vtree owns."""
        deleted = []
        for item in items:
            if not self.is_private(item.entity):
                continue
            real = resolve_entity_path(item.entity)
            try:
                os.remove(real)
            except FileNotFoundError:
                logger.debug(f"Backing file already gone: {real}")
                continue
            deleted.append(real)
            logger.debug(f"Deleted backing file {real}")
        return deleted
