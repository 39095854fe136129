class PipelineError(Exception):
    """Base error for the catalog pipeline."""


class MissingCredentialError(PipelineError):
    pass


class CatalogStoreError(PipelineError):
    def __init__(self, message: str, *, path=None):
        super().__init__(message)
        self.path = path


class CatalogNotFoundError(CatalogStoreError):
    pass


class NothingToMergeError(PipelineError):
    pass


class TranslationError(PipelineError):
    """The provider answered, but not with a usable translation."""
