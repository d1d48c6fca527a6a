"""Image loader collaborators.

The viewport core only needs native pixel dimensions from a loaded image.
Loaders report failure with :class:`ImageLoadError` so the session can
switch to its fallback image.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Tuple

import matplotlib.image as mpimg
import tifffile as tif

from cosmozoom.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["ImageLoadError", "ImageLoader", "FileImageLoader", "StaticImageLoader"]

TIFF_SUFFIXES = {".tif", ".tiff"}


class ImageLoadError(RuntimeError):
    """Raised when a source cannot be turned into a displayable image."""


class ImageLoader(ABC):
    """Resolve a source identifier to native (width, height)."""

    @abstractmethod
    def load(self, source: str) -> Tuple[int, int]:
        """Return native (width, height) or raise :class:`ImageLoadError`."""


class FileImageLoader(ImageLoader):
    """Read dimensions from local raster files.

    TIFF files are inspected with ``tifffile`` without decoding pixel data;
    other formats go through ``matplotlib.image.imread``.
    """

    def load(self, source: str) -> Tuple[int, int]:
        if "://" in source:
            raise ImageLoadError(f"Remote sources are not supported by FileImageLoader: {source}")
        path = Path(source)
        if not path.is_file():
            raise ImageLoadError(f"Image not found: {path}")
        try:
            if path.suffix.lower() in TIFF_SUFFIXES:
                size = self._tiff_size(path)
            else:
                size = self._raster_size(path)
        except (OSError, ValueError, tif.TiffFileError) as exc:
            raise ImageLoadError(f"Could not read {path}: {exc}") from exc
        LOGGER.debug("Read %s: %dx%d", path.name, size[0], size[1])
        return size

    @staticmethod
    def _tiff_size(path: Path) -> Tuple[int, int]:
        with tif.TiffFile(str(path)) as tf:
            page = tf.pages[0]
            return int(page.imagewidth), int(page.imagelength)

    @staticmethod
    def _raster_size(path: Path) -> Tuple[int, int]:
        arr = mpimg.imread(str(path))
        if arr.ndim < 2:
            raise ValueError(f"Unexpected image shape {arr.shape}")
        return int(arr.shape[1]), int(arr.shape[0])


class StaticImageLoader(ImageLoader):
    """Loader backed by a fixed mapping of source -> (width, height).

    Useful for sources whose dimensions are known up front and as a test
    double for the rendering collaborator's loader.
    """

    def __init__(self, sizes: Dict[str, Tuple[int, int]]) -> None:
        self.sizes = dict(sizes)

    def load(self, source: str) -> Tuple[int, int]:
        try:
            return self.sizes[source]
        except KeyError:
            raise ImageLoadError(f"Unknown source: {source}") from None
