# lexsearch/domain/errors.py


class InvalidQueryError(ValueError):
    """Raised when a search term is empty or whitespace-only."""


class RenderingPreconditionError(ValueError):
    """
    Raised when a page layout cannot hold any text at all, e.g. margins
    wider than the page. Reported before rendering starts.
    """
