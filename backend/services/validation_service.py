"""
Validation service for request inputs.
Centralizes validation logic to keep endpoints clean.
"""

from fastapi import HTTPException, UploadFile

from config import MAX_UPLOAD_SIZE


class ValidationService:
    """Handles validation for API requests."""

    MAX_UPLOAD_SIZE = MAX_UPLOAD_SIZE

    @staticmethod
    async def read_text_upload(upload: UploadFile) -> str:
        """
        Validate and read an uploaded text file.

        The size check happens while reading, so an oversized upload is never
        loaded into memory in full.

        Args:
            upload: Uploaded file

        Returns:
            File content decoded as UTF-8 (a leading BOM is dropped)

        Raises:
            HTTPException: If the file is too large or not UTF-8 text
        """
        limit = ValidationService.MAX_UPLOAD_SIZE
        content = await upload.read(limit + 1)

        if len(content) > limit:
            raise HTTPException(
                status_code=413,
                detail=f"Uploaded file too large (max {limit} bytes)"
            )

        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise HTTPException(
                status_code=400,
                detail=f"Uploaded file is not valid UTF-8 text: {e}"
            ) from e
