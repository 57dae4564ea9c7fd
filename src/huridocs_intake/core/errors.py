"""
Exception types raised inside the intake pipeline.
"""


class AnalysisError(Exception):
    """Base class for failures while analyzing a document."""
    pass


class UpstreamError(AnalysisError):
    """The text-generation backend rejected or failed the request."""
    pass


class UpstreamTimeout(UpstreamError):
    """The text-generation backend did not answer within the configured timeout."""
    pass


class ResponseParseError(AnalysisError):
    """The backend answered, but no valid analysis JSON could be read from it."""

    def __init__(self, message: str, response: str = ''):
        super().__init__(message)
        self.response = response


class UnsupportedDocumentError(Exception):
    """Raised when a file type has no text extraction strategy."""
    pass
