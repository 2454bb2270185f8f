"""
Shared constants for image uploads.

Used by the photo, guest and face controllers and the upload use cases.
Single place for easier updates.
"""

# -----------------------------------------------------------------------------
# Image uploads (event photos, registration selfies, search selfies)
# -----------------------------------------------------------------------------
ALLOWED_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp"})
ALLOWED_IMAGE_MIME = frozenset({"image/jpeg", "image/png", "image/webp"})
MAX_IMAGE_BYTES = 25 * 1024 * 1024

# Registration asks guests for a few angles (front, left, right)
MAX_REGISTRATION_PHOTOS = 3

# Subfolder names under the configured storage_dir (see core.config)
EVENT_PHOTO_SUBDIR = "photos"
ORIGINAL_PHOTO_SUBDIR = "originals"
REFERENCE_PHOTO_SUBDIR = "references"
