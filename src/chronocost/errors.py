"""
Exceptions raised by the ChronoCost submission flow.

The HTTP layer maps these onto status codes; the CLI turns them into
SystemExit messages.
"""

from __future__ import annotations


class ChronoCostError(Exception):
    """Base class for all ChronoCost errors."""


class InvalidFileType(ChronoCostError):
    """An uploaded file did not declare the text/csv content type."""

    def __init__(self, content_type: str | None = None) -> None:
        self.content_type = content_type
        super().__init__("Please upload a CSV file")


class SubmissionFailure(ChronoCostError):
    """
    Anything that went wrong between reading the CSV and storing the record.

    The cause is kept on __cause__ for logging, but the message is always
    the same generic text shown to the user.
    """

    def __init__(self, message: str = "Failed to submit project") -> None:
        super().__init__(message)


class SubmissionInProgress(ChronoCostError):
    """A submit was requested while a previous one was still running."""


class DocumentNotFound(ChronoCostError):
    def __init__(self, collection_id: str, document_id: str) -> None:
        self.collection_id = collection_id
        self.document_id = document_id
        super().__init__(f"Document {document_id!r} not found in {collection_id!r}")
