class RecipeCartError(Exception):
    """Base class for errors raised by recipecart."""


class ValidationError(RecipeCartError):
    """Caller supplied structurally invalid input."""


class NotFoundError(RecipeCartError):
    """An operation that needs an existing row matched none."""


class PersistenceError(RecipeCartError):
    """Storage I/O or constraint failure."""


class FetchError(RecipeCartError):
    """The recipe source could not be reached or parsed."""
