"""The session context handed to every shell command."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from vtree.storage import StorageLayout
from vtree.tree import TreeItem, TreeModel

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """One open virtual root.

    The tree is loaded once when the session starts and written back
    whole when it closes, unless the session was discarded.

    Attributes:
        name: Root name
        tree: The live tree model
        document: JSON document the tree was read from
        layout: Workspace layout (private storage lives here)
        discard: Skip saving on close
        pending_deletions: Removed items whose private backing files are
            deleted once the tree is saved
    """

    name: str
    tree: TreeModel
    document: Path
    layout: StorageLayout
    discard: bool = False
    pending_deletions: List[TreeItem] = field(default_factory=list)

    @classmethod
    def open(cls, layout: StorageLayout, name: str) -> "Session":
        """Load a root. Any failure here is fatal to the session."""
        tree = layout.load_tree(name)
        return cls(name=name, tree=tree, document=layout.tree_path(name), layout=layout)

    def save(self) -> None:
        self.tree.to_file(self.document)

    def close(self) -> bool:
        """Persist the tree unless discarded. Returns True if saved.

        Private backing files of removed items are deleted only after a
        successful save, so a discarded session still finds them.
        """
        if self.discard:
            logger.debug(f"Discarding changes to {self.name}")
            self.pending_deletions.clear()
            return False
        self.save()
        self.layout.delete_private_files(self.pending_deletions)
        self.pending_deletions.clear()
        return True
