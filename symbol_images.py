import io
import os
from typing import List

from PIL import Image, ImageOps, UnidentifiedImageError

from spot_it_errors import ConfigurationError, InsufficientResourcesError, RenderFailure

# =========================
# Constants Section
# =========================

DEFAULT_IMAGE_DIR = "img"
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp")

DEFAULT_DPI = 300
MM_PER_INCH = 25.4

# =========================
# End of Constants Section
# =========================

def discover_symbol_images(image_dir: str = DEFAULT_IMAGE_DIR, required: int = 0) -> List[str]:
    """
    Find all symbol images in a directory.

    Args:
        image_dir: Directory containing the symbol images
        required: Minimum number of images the caller needs

    Returns:
        Sorted list of image file paths
    """
    if not os.path.isdir(image_dir):
        raise ConfigurationError(f"Symbol image directory not found: {image_dir}")

    candidates: List[str] = []
    for name in os.listdir(image_dir):
        path = os.path.join(image_dir, name)
        if name.lower().endswith(IMAGE_EXTENSIONS) and os.path.isfile(path):
            candidates.append(path)
    candidates.sort()

    if len(candidates) < required:
        raise InsufficientResourcesError(required=required, available=len(candidates))
    return candidates


def mm_to_px(size_mm: float, dpi: int = DEFAULT_DPI) -> int:
    return max(1, int(round(size_mm * dpi / MM_PER_INCH)))


def load_symbol(path: str) -> Image.Image:
    img = Image.open(path)
    img.load()
    img = img.convert("RGBA")
    # Auto-crop transparent borders so the symbol fills its slot
    bbox = img.split()[-1].getbbox()
    if bbox is not None:
        img = img.crop(bbox)
    return img


def transform_symbol(
    path: str,
    target_size_mm: float,
    rotation_deg: int = 0,
    scale: float = 1.0,
    dpi: int = DEFAULT_DPI,
) -> io.BytesIO:
    """
    Fit a symbol image into a square, rotate it and encode it as PNG.

    Args:
        path: Symbol image file
        target_size_mm: Side of the square slot in millimetres
        rotation_deg: Counter-clockwise rotation, a multiple of 90
        scale: Fraction of the slot the symbol may use
        dpi: Raster resolution used to convert millimetres to pixels

    Returns:
        In-memory PNG, positioned at its start. Close it once drawn.

    Raises:
        RenderFailure: if the file cannot be read, decoded or encoded
    """
    target_px = mm_to_px(target_size_mm * scale, dpi)
    buffer = io.BytesIO()
    try:
        img = load_symbol(path)
        img = ImageOps.contain(img, (target_px, target_px), Image.LANCZOS)
        if rotation_deg % 360:
            img = img.rotate(rotation_deg, expand=True, fillcolor=(0, 0, 0, 0))
        img.save(buffer, "PNG")
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError, ValueError) as e:
        buffer.close()
        raise RenderFailure(f"Failed to process symbol image {path}: {e}", image_path=path) from e
    buffer.seek(0)
    return buffer
