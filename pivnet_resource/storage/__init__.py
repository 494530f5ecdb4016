"""Blob store upload for put steps."""

from .s3 import BotoObjectStore, MockObjectStore, ObjectStore, StorageError
from .upload import UploadedFile, Uploader, match_single_file

__all__ = [
    "BotoObjectStore",
    "MockObjectStore",
    "ObjectStore",
    "StorageError",
    "UploadedFile",
    "Uploader",
    "match_single_file",
]
