"""
Pydantic models for type-safe data structures.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from config import DEFAULT_DOCUMENT_NAME, MAX_CONTENT_LENGTH


class StoredDocument(BaseModel):
    """A document persisted in the document store."""

    id: str = Field(..., description="Generated document identifier")
    name: str = Field(..., description="Display name")
    content: str = Field("", description="Raw document text (markdown, JSON, ...)")
    timestamp: int = Field(..., description="Last modification time in epoch milliseconds")


class DocumentCreate(BaseModel):
    """Request body for POST /documents."""

    name: str = Field(DEFAULT_DOCUMENT_NAME, max_length=255, description="Display name")
    content: str = Field("", max_length=MAX_CONTENT_LENGTH, description="Document text")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Document name cannot be empty")
        return v


class DocumentUpdate(DocumentCreate):
    """Request body for PUT /documents/{doc_id}."""

    name: str = Field(..., max_length=255, description="Display name")


class CurrentDocumentRequest(BaseModel):
    id: str = Field(..., description="Identifier of the document to make current")


class ContentRequest(BaseModel):
    """Request body carrying raw text to convert."""

    content: str = Field(..., max_length=MAX_CONTENT_LENGTH, description="Raw input text")


class MarkdownRenderRequest(ContentRequest):
    format: Literal["markdown", "html", "text"] = Field(
        "markdown", description="How to interpret the content"
    )


class ConversionResponse(BaseModel):
    output: str


class RenderResponse(BaseModel):
    html: str


class TokenStats(BaseModel):
    """Token counts of the same data as pretty JSON and as TOON."""

    json_tokens: int = Field(..., description="Tokens in 2-space indented JSON")
    toon_tokens: int = Field(..., description="Tokens in TOON output")
    saved_tokens: int = Field(0, description="json_tokens - toon_tokens")
    savings_percent: float = Field(0.0, description="Share of JSON tokens saved")


class TreeNode(BaseModel):
    """Node of the JSON tree view."""

    key: str
    value: Any = None
    type: Literal["object", "array", "string", "number", "boolean", "null"]
    children: list["TreeNode"] | None = None
