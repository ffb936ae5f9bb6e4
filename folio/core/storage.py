"""
Media storage for uploaded photos, spec sheets and videos.

Files go to Azure Blob Storage when AZURE_STORAGE_CONNECTION_STRING is set,
otherwise to Django's default storage under MEDIA_ROOT.
"""
import logging
import os
import uuid
from typing import Optional, Dict, Any

from django.conf import settings
from django.core.files.storage import default_storage
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

IMAGE_CONTENT_TYPES = {'image/jpeg', 'image/png', 'image/webp', 'image/gif', 'image/heic'}
ALLOWED_FOLDERS = {'selections', 'projects', 'spec-sheets', 'videos', 'events', 'profiles', 'products', 'quotes'}


class StorageError(Exception):
    """Raised when an uploaded file cannot be stored"""


def build_blob_name(folder: str, filename: str) -> str:
    """Unique, folder-scoped object name that keeps the original extension"""
    folder = folder if folder in ALLOWED_FOLDERS else 'uploads'
    _, ext = os.path.splitext(filename or '')
    return f"{folder}/{uuid.uuid4().hex}{ext.lower()}"


def read_image_size(uploaded_file) -> Optional[Dict[str, int]]:
    """Pixel dimensions of an image upload, or None when it is not an image"""
    try:
        uploaded_file.seek(0)
        with Image.open(uploaded_file) as img:
            width, height = img.size
        return {'width': width, 'height': height}
    except (UnidentifiedImageError, OSError, ValueError):
        return None
    finally:
        uploaded_file.seek(0)


def _upload_to_azure(uploaded_file, blob_name: str, content_type: str) -> str:
    from azure.storage.blob import BlobServiceClient, ContentSettings

    service = BlobServiceClient.from_connection_string(settings.AZURE_STORAGE_CONNECTION_STRING)
    blob_client = service.get_blob_client(container=settings.AZURE_STORAGE_CONTAINER, blob=blob_name)
    uploaded_file.seek(0)
    blob_client.upload_blob(
        uploaded_file,
        overwrite=True,
        content_settings=ContentSettings(content_type=content_type or 'application/octet-stream'),
    )
    return blob_client.url


def _upload_to_default_storage(uploaded_file, blob_name: str) -> str:
    uploaded_file.seek(0)
    saved_name = default_storage.save(blob_name, uploaded_file)
    return default_storage.url(saved_name)


def upload_file(uploaded_file, folder: str = 'uploads') -> Dict[str, Any]:
    """
    Store an uploaded file and describe it.

    Returns:
        dict with url, name (original file name), blob_name, size, content_type
        and, for images, width/height in pixels

    Raises:
        StorageError: file missing, too large or the backend refused it
    """
    if uploaded_file is None:
        raise StorageError('No file provided')

    max_size = getattr(settings, 'MAX_UPLOAD_SIZE', 50 * 1024 * 1024)
    if uploaded_file.size and uploaded_file.size > max_size:
        raise StorageError(f'File too large ({uploaded_file.size} bytes, max {max_size})')

    content_type = getattr(uploaded_file, 'content_type', '') or ''
    blob_name = build_blob_name(folder, uploaded_file.name)
    dimensions = read_image_size(uploaded_file) if content_type in IMAGE_CONTENT_TYPES else None

    try:
        if settings.AZURE_STORAGE_CONNECTION_STRING:
            url = _upload_to_azure(uploaded_file, blob_name, content_type)
        else:
            url = _upload_to_default_storage(uploaded_file, blob_name)
    except Exception as e:
        logger.error(f"Failed to store upload {uploaded_file.name}: {str(e)}")
        raise StorageError(f'Could not store file: {str(e)}')

    logger.info(f"Stored upload {uploaded_file.name} as {blob_name}")
    result = {
        'url': url,
        'name': uploaded_file.name,
        'blob_name': blob_name,
        'size': uploaded_file.size,
        'content_type': content_type,
    }
    if dimensions:
        result.update(dimensions)
    return result
