"""Image decoding and resizing.

This module implements:
- load_pixels(image_path) -> np.ndarray in the file's native layout
- resize_pixels(pixels, rows, cols) -> np.ndarray of shape (rows, cols[, channels])
- load_image(image_path, size) -> ImageRecord

Grayscale and palette images decode to 2-D arrays, colour images to
``(rows, cols, channels)``; the shape is what decides whether two images can
be compared at all, so no mode conversion happens here.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from .logging import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


class DecodeError(Exception):
    """Raised when a path cannot be decoded as an image."""


@dataclass
class ImageRecord:
    path: str
    shape: Tuple[int, ...]
    pixels: Optional[np.ndarray] = None


def load_pixels(image_path: PathLike) -> np.ndarray:
    """Decode the first frame of ``image_path`` into a numpy array."""
    try:
        with Image.open(str(image_path)) as img:
            img.load()
            arr = np.asarray(img)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Unable to read image: {image_path}") from exc
    if arr.ndim < 2 or arr.size == 0:
        raise DecodeError(f"Image has no pixel data: {image_path}")
    logger.debug("Decoded %s with shape %s (%s)", image_path, arr.shape, arr.dtype)
    return arr


_CV2_RESIZE_DTYPES = (np.uint8, np.uint16, np.int16, np.float32, np.float64)


def resize_pixels(pixels: np.ndarray, rows: int, cols: int) -> np.ndarray:
    """Resize to ``rows x cols`` keeping the channel count and dtype."""
    if pixels.shape[0] == rows and pixels.shape[1] == cols:
        return pixels
    src = pixels
    if src.dtype.type not in _CV2_RESIZE_DTYPES:
        src = src.astype(np.float64)
    # cv2 takes (width, height)
    resized = cv2.resize(src, (int(cols), int(rows)), interpolation=cv2.INTER_CUBIC)
    if pixels.ndim == 3 and resized.ndim == 2:
        # single-channel 3-D input comes back squeezed
        resized = resized[:, :, np.newaxis]
    if pixels.dtype == np.bool_:
        return resized > 0.5
    if resized.dtype != pixels.dtype:
        if np.issubdtype(pixels.dtype, np.integer):
            info = np.iinfo(pixels.dtype)
            resized = np.clip(np.rint(resized), info.min, info.max)
        resized = resized.astype(pixels.dtype)
    return resized


def load_image(image_path: PathLike, size: Optional[Tuple[int, int]] = None) -> ImageRecord:
    """Decode ``image_path`` and resize it when ``size`` is given."""
    pixels = load_pixels(image_path)
    if size is not None:
        pixels = resize_pixels(pixels, size[0], size[1])
    return ImageRecord(path=str(image_path), shape=tuple(pixels.shape), pixels=pixels)
