"""
vtree - virtual file trees over real files.

Main API:
    from vtree import TreeModel, StorageLayout

    layout = StorageLayout()          # .vtree under the current directory
    layout.init()
    layout.new_tree("papers")

    tree = layout.load_tree("papers")
    tree.make_directory("reading")
    tree.move_by_string("reading")
    tree.add_alias(None, "/home/me/Downloads/paper.pdf")
    print(tree.root)

    tree.to_file(layout.tree_path("papers"))
"""

from .tree import TreeItem, TreeModel, PathVector
from .storage import StorageLayout

__version__ = "0.1.0"
__all__ = ["TreeItem", "TreeModel", "PathVector", "StorageLayout"]
