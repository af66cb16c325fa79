class TranslationError(Exception):
    """Base class for every error raised by the translator."""


class ConfigurationError(TranslationError):
    """Invalid settings or input supplied by the caller."""


class SentenceNotFoundError(ConfigurationError):
    def __init__(self, index: int):
        super().__init__(f"Source sentence not found: {index}")
        self.index = index


class TranslationAPIError(TranslationError):
    """The translation endpoint failed or could not be reached."""


class InvalidResponseError(TranslationAPIError):
    """The endpoint answered, but without usable message content."""


class StorageError(TranslationError):
    """Persisting to the key-value store failed."""
