"""REPL shell for interactive navigation of a virtual tree.

This module provides an interactive shell that maps filesystem verbs
(cd, ls, cat, mkdir, rm, ...) onto a TreeModel.
"""

from vtree.repl.session import Session
from vtree.repl.shell import VTreeShell

__all__ = ["Session", "VTreeShell"]
