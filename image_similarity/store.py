"""Candidate validation and pixel sources.

Every candidate is decoded once to check that it is an image; paths that fail
are dropped with a console notice. The surviving images are then served to the
matcher by an ``ImageSource``: ``InMemorySource`` keeps all of them (resized
if configured), ``LazySource`` decodes again on every request.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence

import numpy as np

from .config import Configuration
from .loader import DecodeError, ImageRecord, load_image, load_pixels, resize_pixels
from .logging import get_logger

logger = get_logger(__name__)


class ImageSource(ABC):
    """Index -> pixels access over the validated candidate list."""

    def __init__(self, paths: Sequence[str], size=None):
        self.paths = list(paths)
        self.size = size

    def __len__(self) -> int:
        return len(self.paths)

    def path(self, index: int) -> str:
        return self.paths[index]

    @abstractmethod
    def load(self, index: int) -> np.ndarray:
        raise NotImplementedError


class InMemorySource(ImageSource):
    def __init__(self, records: Sequence[ImageRecord], size=None):
        super().__init__([r.path for r in records], size=size)
        self._pixels: Dict[int, np.ndarray] = {i: r.pixels for i, r in enumerate(records)}

    def load(self, index: int) -> np.ndarray:
        return self._pixels[index]


class LazySource(ImageSource):
    def load(self, index: int) -> np.ndarray:
        return load_image(self.paths[index], self.size).pixels


@dataclass
class ImageStore:
    config: Configuration
    source: ImageSource

    @property
    def paths(self) -> List[str]:
        return self.source.paths

    def __len__(self) -> int:
        return len(self.source)


def build_store(
    candidates: Sequence[str],
    config: Configuration,
    console: Callable[[str], None] = print,
) -> ImageStore:
    """Decode every candidate, resolve resize dimensions and pick the source.

    The returned store carries the final configuration: when resizing without
    explicit dimensions they come from the first image that decodes.
    """
    console(f"CHECKING FOR VALID IMAGES: {len(candidates)}\n")
    valid: List[str] = []
    records: List[ImageRecord] = []
    for path in candidates:
        try:
            pixels = load_pixels(path)
        except DecodeError as exc:
            logger.debug("%s", exc)
            console(f"FILE NOT VALID IMAGE: {path}")
            continue
        valid.append(path)
        if config.resize and (config.rows is None or config.cols is None):
            config = config.with_dimensions(pixels.shape[0], pixels.shape[1])
        if config.store_images:
            size = config.target_size
            if size is not None:
                pixels = resize_pixels(pixels, size[0], size[1])
            records.append(ImageRecord(path=path, shape=tuple(pixels.shape), pixels=pixels))

    if config.store_images:
        source: ImageSource = InMemorySource(records, size=config.target_size)
    else:
        source = LazySource(valid, size=config.target_size)

    logger.debug(
        "Validated %d of %d candidate(s) (%s)",
        len(valid),
        len(candidates),
        type(source).__name__,
    )
    return ImageStore(config=config, source=source)
