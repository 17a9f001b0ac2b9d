"""Binary portable-pixmap (P6) export.

A P6 file is an ASCII header followed by raw RGB bytes:

    P6
    <width> <height>
    255
    <3 * width * height bytes, row-major, top row first>

Colors must already be clamped to [0, 1]; the writer does not clamp again.
Each component becomes int(component * 255), truncating toward zero.

Encoding is done by Pillow's PPM plugin, which writes exactly this header for
RGB images.

Example:
    >>> import numpy as np
    >>> from spheretrace.output.pixmap import encode_ppm
    >>> encode_ppm(np.ones((1, 2, 3), dtype=np.float32))[:11]
    b'P6\\n2 1\\n255\\n'
"""

from __future__ import annotations

import io
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

PPM_MAX_VALUE = 255


def _check_raster(image: npt.NDArray[np.floating]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError(f"Image has no pixels: {image.shape}")


def ppm_header(width: int, height: int) -> bytes:
    """Build the P6 header for an image of the given size."""
    return b"P6\n%d %d\n%d\n" % (width, height, PPM_MAX_VALUE)


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a [0, 1] float image to bytes by truncating component * 255.

    Args:
        image: Float image of shape (H, W, 3) with components in [0, 1].

    Returns:
        uint8 array of shape (H, W, 3).

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    _check_raster(image)
    return (image.astype(np.float32) * PPM_MAX_VALUE).astype(np.uint8)


def encode_ppm(image: npt.NDArray[np.floating]) -> bytes:
    """Encode a [0, 1] float image as P6 pixmap bytes.

    Args:
        image: Float image of shape (H, W, 3), row 0 at the top.

    Returns:
        The complete file contents.
    """
    buffer = io.BytesIO()
    _write_ppm(image_to_uint8(image), buffer)
    return buffer.getvalue()


def save_ppm(image: npt.NDArray[np.floating], filepath: str | Path) -> Path:
    """Save a [0, 1] float image as a P6 pixmap file.

    The file is opened once, fully written and closed, also when writing
    fails. Errors from the file system propagate as OSError.

    Args:
        image: Float image of shape (H, W, 3), row 0 at the top.
        filepath: Output file path (conventionally ending in .ppm).

    Returns:
        The path written.

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
        OSError: If the file cannot be opened or written.
    """
    image_uint8 = image_to_uint8(image)
    output_path = Path(filepath)
    with open(output_path, "wb") as fp:
        _write_ppm(image_uint8, fp)
    return output_path


def _write_ppm(image_uint8: npt.NDArray[np.uint8], fp) -> None:
    # Pillow infers mode "RGB" from a (H, W, 3) uint8 array
    pil_image = PILImage.fromarray(np.ascontiguousarray(image_uint8))
    pil_image.save(fp, format="PPM")
