class MDViewError(Exception):
    """Base exception for MDView errors."""
    pass


class DocumentNotFoundError(MDViewError):
    """Requested document does not exist."""

    def __init__(self, doc_id: str):
        super().__init__(f"Document not found: {doc_id}")
        self.doc_id = doc_id


class StorageError(MDViewError):
    """Error reading or writing the document store."""
    pass


class UnsupportedFormatError(MDViewError):
    """Requested render or export format is not supported."""
    pass
