"""Exception hierarchy."""


class SkilldexError(Exception):
    """Base class for all errors raised by skilldex."""


class ConfigurationError(SkilldexError):
    """Static configuration is unusable (e.g. a pipeline without formats)."""


class PipelineError(SkilldexError):
    """A content pipeline could not list its documents."""


class SearchIndexError(SkilldexError):
    """The search index collaborator failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CollectionNotFoundError(SearchIndexError):
    """The collection does not exist yet; callers treat this as empty."""


class DocumentNotFoundError(SearchIndexError):
    """A point lookup found no document with the requested id."""


class IndexingError(SkilldexError):
    """Every document of an upsert batch was rejected."""
