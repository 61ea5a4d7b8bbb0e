# ==============================================================================
# IMAGE ENCODING - JPEG uploads stored inline as data URIs
# ==============================================================================
# Ticket attachments, inspection photos and asset photos live inside the
# JSON state itself; there is no separate file storage.
# Only JPEG is accepted.
# ==============================================================================

import base64
import os
from typing import Optional

from werkzeug.utils import secure_filename

JPEG_MIMETYPES = frozenset(['image/jpeg', 'image/jpg', 'image/pjpeg'])
JPEG_EXTENSIONS = frozenset(['jpg', 'jpeg'])
JPEG_MAGIC = b'\xff\xd8\xff'

REJECTION_MESSAGE = 'กรุณาเลือกไฟล์รูปภาพ JPEG เท่านั้น'


class UnsupportedImageError(ValueError):
    """Upload is not a JPEG. The message is user-facing."""
    pass


def is_jpeg(filename: Optional[str], content_type: Optional[str], data: bytes) -> bool:
    """JPEG mimetype or extension, and JPEG bytes."""
    ext = os.path.splitext(secure_filename(filename or ''))[1].lower().lstrip('.')
    declared = (content_type or '').split(';')[0].strip().lower()
    if declared not in JPEG_MIMETYPES and ext not in JPEG_EXTENSIONS:
        return False
    return data[:3] == JPEG_MAGIC


def encode_jpeg(filename: Optional[str], content_type: Optional[str], data: bytes) -> str:
    """
    Encodes an uploaded JPEG as a data URI.

    Raises:
        UnsupportedImageError: For any non-JPEG upload
    """
    if not data or not is_jpeg(filename, content_type, data):
        raise UnsupportedImageError(REJECTION_MESSAGE)
    return 'data:image/jpeg;base64,' + base64.b64encode(data).decode('ascii')
