"""
Image storage for vehicles, rental options and editorial content.

Files are written under UPLOAD_ROOT using fixed folder conventions; the
returned public path (e.g. ``/vehicles/cabrio/B1_Fiat_500C_1718000000000.jpg``)
is what gets stored on the owning row.
"""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Optional

import structlog

from car_rental.metrics import uploads_total
from car_rental.utils.text import safe_name

logger = structlog.get_logger(__name__)

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif", "avif"}
MAX_UPLOAD_BYTES = 5 * 1024 * 1024

PLACEHOLDER_NAME = "vehicle-placeholder.jpg"

# Checked in order; the first keyword found in the category name wins
CATEGORY_FOLDERS = [
    ("saloon manual", "saloon-manual"),
    ("saloon automatic", "saloon-automatic"),
    ("cabrio", "cabrio"),
    ("people carrier", "people-carrier"),
    ("suv", "suv-4wd"),
    ("4wd", "suv-4wd"),
]


class InvalidUploadError(ValueError):
    """Raised when an uploaded file is empty, too large or not an image."""


def category_folder(category_name: Optional[str]) -> str:
    """
    Map a vehicle category name to its image folder.

    Example:
        >>> category_folder("SUV 4WD")
        'suv-4wd'
        >>> category_folder("Luxury")
        'other'
    """
    name = (category_name or "").lower()
    for keyword, folder in CATEGORY_FOLDERS:
        if keyword in name:
            return folder
    return "other"


def placeholder_path(category_name: Optional[str]) -> str:
    return f"/vehicles/{category_folder(category_name)}/{PLACEHOLDER_NAME}"


def _timestamp() -> int:
    return int(time.time() * 1000)


def _extension(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext not in ALLOWED_EXTENSIONS:
        raise InvalidUploadError(f"Unsupported image type: .{ext or '?'}")
    return ext


def _validate(content: bytes) -> None:
    if not content:
        raise InvalidUploadError("Uploaded file is empty")
    if len(content) > MAX_UPLOAD_BYTES:
        raise InvalidUploadError("Uploaded file exceeds 5 MB")


def _write(root: str, public_path: str, content: bytes) -> None:
    target = Path(root) / public_path.lstrip("/")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)


def save_vehicle_image(
    root: str,
    category_name: Optional[str],
    group: str,
    vehicle_name: str,
    filename: str,
    content: bytes,
) -> str:
    """
    Store a vehicle photo in its category folder.

    Args:
        root: Upload root directory
        category_name: Vehicle category name (selects the folder)
        group: Vehicle group code
        vehicle_name: Vehicle model name
        filename: Original file name (for the extension)
        content: File bytes

    Returns:
        str: Public path of the stored image

    Raises:
        InvalidUploadError: If the file is not an acceptable image
    """
    try:
        _validate(content)
        ext = _extension(filename)
    except InvalidUploadError:
        uploads_total.labels(kind="vehicle", status="rejected").inc()
        raise

    folder = category_folder(category_name)
    name = f"{safe_name(group)}_{safe_name(vehicle_name)}_{_timestamp()}.{ext}"
    public_path = f"/vehicles/{folder}/{name}"
    _write(root, public_path, content)

    uploads_total.labels(kind="vehicle", status="success").inc()
    logger.info("vehicle_image_saved", path=public_path, size=len(content))
    return public_path


def save_rental_option_image(root: str, code: str, filename: str, content: bytes) -> str:
    """
    Store a rental option photo as ``/rental-options/<code>_<timestamp>.<ext>``.

    Raises:
        InvalidUploadError: If the file is not an acceptable image
    """
    try:
        _validate(content)
        ext = _extension(filename)
    except InvalidUploadError:
        uploads_total.labels(kind="rental_option", status="rejected").inc()
        raise

    public_path = f"/rental-options/{safe_name(code.lower())}_{_timestamp()}.{ext}"
    _write(root, public_path, content)

    uploads_total.labels(kind="rental_option", status="success").inc()
    logger.info("rental_option_image_saved", path=public_path, size=len(content))
    return public_path


def save_content_image(root: str, filename: str, content: bytes) -> str:
    """
    Store an editorial image as ``/content/<timestamp>_<name>``.

    Raises:
        InvalidUploadError: If the file is not an acceptable image
    """
    try:
        _validate(content)
        _extension(filename)
    except InvalidUploadError:
        uploads_total.labels(kind="content", status="rejected").inc()
        raise

    base_name = os.path.basename(filename).replace(" ", "_")
    public_path = f"/content/{_timestamp()}_{base_name}"
    _write(root, public_path, content)

    uploads_total.labels(kind="content", status="success").inc()
    logger.info("content_image_saved", path=public_path, size=len(content))
    return public_path


def remove_vehicle_image(root: str, image_path: Optional[str]) -> bool:
    """
    Delete a stored vehicle image unless it is a category placeholder.

    Args:
        root: Upload root directory
        image_path: Public path stored on the vehicle

    Returns:
        bool: True if a file was deleted
    """
    if not image_path or image_path.endswith(PLACEHOLDER_NAME):
        return False

    root_dir = Path(root).resolve()
    target = (root_dir / image_path.lstrip("/")).resolve()
    if root_dir not in target.parents:
        logger.warning("vehicle_image_outside_upload_root", path=image_path)
        return False

    if target.is_file():
        target.unlink()
        logger.info("vehicle_image_deleted", path=image_path)
        return True

    logger.info("vehicle_image_missing_on_disk", path=image_path)
    return False
