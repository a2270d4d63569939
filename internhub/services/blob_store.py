"""
Blob Store - resume files in a MongoDB GridFS bucket.

Files are stored under "{student_id}/{timestamp_ms}{ext}" keys. The key is
what the application record keeps; there is no public read URL.
"""

import logging
from datetime import datetime
from typing import Optional

import gridfs
from pymongo.errors import PyMongoError

from internhub.core.config import get_settings
from internhub.core.errors import StoreError
from internhub.db.mongodb import get_mongo_db
from internhub.utils.file_upload import ResumeFile

settings = get_settings()
logger = logging.getLogger(__name__)


def resume_key(student_id: str, resume: ResumeFile, uploaded_at: datetime) -> str:
    """Storage key namespaced by student, keeping the original extension."""
    millis = int(uploaded_at.timestamp() * 1000)
    return f"{student_id}/{millis}{resume.extension}"


class BlobStore:
    """
    Handles resume file storage.
    """

    def __init__(self, bucket: Optional[str] = None):
        self.bucket = bucket or settings.resume_bucket
        self._fs: Optional[gridfs.GridFS] = None

    @property
    def fs(self) -> gridfs.GridFS:
        if self._fs is None:
            self._fs = gridfs.GridFS(get_mongo_db(), collection=self.bucket)
        return self._fs

    def upload_resume(self, student_id: str, resume: ResumeFile, uploaded_at: datetime) -> str:
        """
        Store a resume file.

        Returns:
            The storage key (store this on the application record)
        """
        key = resume_key(student_id, resume, uploaded_at)
        try:
            self.fs.put(
                resume.content,
                filename=key,
                content_type=resume.content_type,
                metadata={"student_id": student_id, "original_filename": resume.filename}
            )
        except PyMongoError as e:
            logger.error("Resume upload failed for %s: %s", key, e)
            raise StoreError("Could not upload your resume. Please try again.") from e
        return key


# Singleton instance
_blob_store: BlobStore = None


def get_blob_store() -> BlobStore:
    """Get or create the blob store (singleton pattern). Also a FastAPI dependency."""
    global _blob_store
    if _blob_store is None:
        _blob_store = BlobStore()
    return _blob_store
