"""Virtual tree model.

A virtual tree is a named hierarchy whose leaves alias real files that
stay wherever they are on disk. It is navigated with filesystem verbs
and persisted as one JSON document per named root.

Architecture:

    ```
    papers                      # root TreeItem (the document)
    ├── reading/                # TreeItem without entity: a directory
    │   ├── attention.pdf       # TreeItem with entity -> ~/Downloads/1706.03762.pdf
    │   └── notes.txt           # entity -> ./.vtree/virtual-files/notes-0.txt
    └── archive/
    ```

Components:

    - TreeItem: a vertex; owns its children, may carry ``desc`` and ``entity``
    - PathVector: immutable list of segment names (the cursor)
    - TreeModel: root + cursor; path resolution, navigation, mutation, JSON

Document schema (recursive)::

    {"name": str, "children": [...], "desc": str | null, "entity": str | null}
"""

from vtree.tree.errors import (
    TreeError,
    NotFoundError,
    NotAFileError,
    AlreadyExistsError,
    AmbiguousError,
    InvalidNameError,
)
from vtree.tree.item import TreeItem, is_valid_item_name, split_nth_item
from vtree.tree.path import PathVector
from vtree.tree.model import TreeModel
from vtree.tree.entity import resolve_entity_path, unique_backing_path

__all__ = [
    # Core classes
    "TreeModel",
    "TreeItem",
    "PathVector",
    # Errors
    "TreeError",
    "NotFoundError",
    "NotAFileError",
    "AlreadyExistsError",
    "AmbiguousError",
    "InvalidNameError",
    # Helpers
    "is_valid_item_name",
    "split_nth_item",
    "resolve_entity_path",
    "unique_backing_path",
]
