class TextGenerationError(RuntimeError):
    """Raised when the text-generation provider fails or returns nothing usable."""
    pass


class PersistenceError(RuntimeError):
    """Raised when a file-backed store cannot be written."""
    pass


class SpreadsheetFormatError(ValueError):
    """Raised when an uploaded sheet has no usable rows."""
    pass
