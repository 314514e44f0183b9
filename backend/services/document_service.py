"""
Document service: CRUD over the document store plus export rendering.
"""

import html

from config import DATA_DIR, SUPPORTED_EXPORT_FORMATS
from core.exceptions import DocumentNotFoundError, UnsupportedFormatError
from core.json_utils import format_json, json_to_toon
from core.markdown_renderer import render_markdown
from core.models import StoredDocument
from core.storage import DocumentStore
from logger import get_logger

logger = get_logger(__name__)

EXPORT_MEDIA_TYPES = {
    "md": "text/markdown",
    "txt": "text/plain",
    "html": "text/html",
    "json": "application/json",
    "toon": "text/plain",
}


class DocumentService:
    """Manages stored documents and renders them for download."""

    def __init__(self, store: DocumentStore | None = None):
        self.store = store or DocumentStore(DATA_DIR)

    def list_documents(self) -> list[StoredDocument]:
        return self.store.get_documents()

    def create_document(self, name: str, content: str) -> StoredDocument:
        return self.store.save_document(name, content)

    def get_document(self, doc_id: str) -> StoredDocument:
        doc = self.store.get_document(doc_id)
        if doc is None:
            raise DocumentNotFoundError(doc_id)
        return doc

    def update_document(self, doc_id: str, name: str, content: str) -> StoredDocument:
        doc = self.store.update_document(doc_id, name, content)
        if doc is None:
            raise DocumentNotFoundError(doc_id)
        return doc

    def delete_document(self, doc_id: str) -> None:
        if not self.store.delete_document(doc_id):
            raise DocumentNotFoundError(doc_id)

    def get_current_document(self) -> StoredDocument | None:
        doc_id = self.store.get_current_document()
        return self.store.get_document(doc_id) if doc_id else None

    def set_current_document(self, doc_id: str) -> StoredDocument:
        doc = self.get_document(doc_id)
        self.store.set_current_document(doc_id)
        return doc

    def clear_current_document(self) -> None:
        self.store.clear_current_document()

    @staticmethod
    def format_export(doc: StoredDocument, format_type: str) -> str:
        """
        Render a document into the requested export format.

        json and toon exports parse the document content as JSON and raise
        json.JSONDecodeError when it is not.
        """
        if format_type not in SUPPORTED_EXPORT_FORMATS:
            raise UnsupportedFormatError(f"Unsupported export format: {format_type}")

        if format_type == "json":
            return format_json(doc.content) + "\n"
        if format_type == "toon":
            return json_to_toon(doc.content) + "\n"
        if format_type == "html":
            body = render_markdown(doc.content)
            title = html.escape(doc.name)
            return (
                "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
                f"<title>{title}</title>\n</head>\n<body>\n"
                f"<h1>{title}</h1>\n<hr>\n{body}</body>\n</html>\n"
            )
        # md / txt: raw content
        return doc.content

    @staticmethod
    def export_filename(doc: StoredDocument, format_type: str) -> str:
        safe_name = "".join(c if c.isalnum() or c in "-_." else "_" for c in doc.name).strip("_")
        return f"{safe_name or 'document'}.{format_type}"
