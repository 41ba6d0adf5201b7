"""Error kinds raised by the generation, reconciliation and deletion engines."""


class PageGenError(Exception):
    """Base class for all pagegen errors."""


class InvalidInput(PageGenError):
    """The CSV could not be read, or an argument is not acceptable."""


class TemplateNotFound(PageGenError):
    """The template identifier does not resolve to an existing document."""


class Unauthorized(PageGenError):
    """The caller lacks the capability required for a destructive operation."""


class PersistenceError(PageGenError):
    """The document store rejected a write."""
