"""Output module for writing rendered images."""

from .pixmap import encode_ppm, image_to_uint8, ppm_header, save_ppm

__all__ = [
    "save_ppm",
    "encode_ppm",
    "image_to_uint8",
    "ppm_header",
]
