"""
File Upload Utility - Validate resume uploads.

Supported formats:
- PDF (.pdf)
- Word (.doc, .docx)

Max file size comes from settings.max_resume_size_mb (10MB by default).
"""

from typing import Optional
from fastapi import UploadFile
from pydantic import BaseModel

from internhub.core.config import get_settings
from internhub.core.errors import ValidationFailed

settings = get_settings()

ALLOWED_EXTENSIONS = {'.pdf', '.doc', '.docx'}

CONTENT_TYPES = {
    '.pdf': 'application/pdf',
    '.doc': 'application/msword',
    '.docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
}


class ResumeFile(BaseModel):
    filename: str
    content: bytes
    content_type: str

    @property
    def extension(self) -> str:
        return get_file_extension(self.filename)


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def get_supported_formats() -> dict:
    """Get info about supported file formats."""
    return {
        "supported_formats": [
            {"extension": ".pdf", "name": "PDF"},
            {"extension": ".doc", "name": "Word 97-2003 Document"},
            {"extension": ".docx", "name": "Word Document"}
        ],
        "max_size_mb": settings.max_resume_size_mb
    }


async def read_upload(file: Optional[UploadFile]) -> Optional[ResumeFile]:
    """
    Read an uploaded file into memory.

    Returns:
        ResumeFile, or None when nothing was attached
    """
    if file is None or not file.filename:
        return None

    content = await file.read()
    ext = get_file_extension(file.filename)
    return ResumeFile(
        filename=file.filename,
        content=content,
        content_type=file.content_type or CONTENT_TYPES.get(ext, "application/octet-stream")
    )


def validate_resume(resume: ResumeFile) -> None:
    """
    Check type and size of a resume.

    Raises:
        ValidationFailed on unsupported type, empty or oversized files
    """
    if resume.extension not in ALLOWED_EXTENSIONS:
        raise ValidationFailed(
            f"Unsupported file type '{resume.extension}'. Allowed: PDF, DOC, DOCX",
            title="Invalid resume"
        )

    if not resume.content:
        raise ValidationFailed("The resume file is empty.", title="Invalid resume")

    if len(resume.content) > settings.max_resume_size_bytes:
        raise ValidationFailed(
            f"File too large. Maximum size: {settings.max_resume_size_mb}MB",
            title="Invalid resume"
        )
