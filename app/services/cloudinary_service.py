import cloudinary
import cloudinary.uploader
from app.config import settings
import logging
import uuid

logger = logging.getLogger(__name__)

_cloudinary_configured = False


def _ensure_cloudinary_configured():
    """Ensure Cloudinary is configured"""
    global _cloudinary_configured
    if not _cloudinary_configured:
        if not settings.CLOUDINARY_CLOUD_NAME or not settings.CLOUDINARY_API_KEY or not settings.CLOUDINARY_API_SECRET:
            raise ValueError("Cloudinary credentials not configured. Please set CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, and CLOUDINARY_API_SECRET in .env")
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True,
        )
        _cloudinary_configured = True


def upload_image_to_cloudinary(file_content: bytes, file_name: str, folder: str = None) -> str:
    """
    Upload a listing image to Cloudinary (blocking; call from a threadpool)
    Returns the secure URL of the stored image
    """
    _ensure_cloudinary_configured()
    folder = folder or settings.CLOUDINARY_FOLDER
    try:
        result = cloudinary.uploader.upload(
            file_content,
            public_id=uuid.uuid4().hex,
            resource_type="image",
            folder=folder,
        )
    except Exception as e:
        logger.error(f"Cloudinary upload failed for {file_name}: {e}")
        raise ValueError(f"Failed to upload image '{file_name}': {str(e)}")

    return result["secure_url"]
