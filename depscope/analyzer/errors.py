"""Error taxonomy for marker provision and usage queries."""


class DepscopeError(Exception):
    """Base error for all depscope failures."""


class InvalidPositionError(DepscopeError):
    """The source position no longer points into a readable source file."""

    def __init__(self, position, reason: str):
        self.position = position
        super().__init__(f"Invalid position {position}: {reason}")


class NotAClassDeclarationError(DepscopeError):
    """The token at a position is not the name of a class declaration."""

    def __init__(self, position):
        self.position = position
        super().__init__(f"No class declaration named at {position}")


class StaleReferenceError(DepscopeError):
    """The target class changed or vanished after its marker was created."""

    def __init__(self, target):
        self.target = target
        super().__init__(f"Class {target.display_name} is no longer valid")


class UnclassifiableUsageError(DepscopeError):
    """A usage site lives in a unit that has no package name."""


class QueryCancelledError(DepscopeError):
    """The host cancelled the query before it finished."""
