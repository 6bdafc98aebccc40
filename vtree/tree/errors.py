"""Errors raised by the virtual tree model."""


class TreeError(Exception):
    """Base error for tree lookups and mutations."""
    pass


class NotFoundError(TreeError):
    """A referenced path, segment or child does not exist."""
    pass


class NotAFileError(NotFoundError):
    """The target exists but does not resolve to a file on disk."""
    pass


class AlreadyExistsError(TreeError):
    """A new entry collides with an existing one."""
    pass


class AmbiguousError(TreeError):
    """A ``#n`` disambiguator is past the number of same-named siblings."""

    def __init__(self, name: str, count: int):
        super().__init__(f"There are only {count} items with name {name}")
        self.name = name
        self.count = count


class InvalidNameError(TreeError):
    """A name contains a reserved character."""
    pass
