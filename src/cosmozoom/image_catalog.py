"""Known image records and metadata lookup."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple
from urllib.parse import urlparse

__all__ = [
    "ImageRecord",
    "FALLBACK_IMAGE",
    "KNOWN_IMAGES",
    "source_key",
    "metadata_for",
    "upload_record",
    "parse_resolution",
]


def source_key(source: str) -> str:
    """File name of a path or URL, without query string."""
    path = urlparse(source).path if "://" in source else source
    name = path.replace("\\", "/").rstrip("/").split("/")[-1]
    return name or source


@dataclass(frozen=True)
class ImageRecord:
    """Descriptive metadata for a loadable image.

    Parameters
    ----------
    source : str
        Path or URL handed to the image loader.
    title, description : str
        Display text.
    resolution : str
        Declared "W×H" resolution; replaced by the measured size on load.
    pixel_scale : float
        Arcseconds per native pixel at 100% zoom.
    origin : str
        Where the image comes from (telescope, upload, URL).
    coordinates : str
        Declared sky position, free text.
    """

    source: str
    title: str
    description: str = ""
    resolution: str = "Unknown"
    pixel_scale: float = 0.1
    origin: str = "Archive"
    coordinates: str = "N/A"

    @property
    def key(self) -> str:
        return source_key(self.source)


FALLBACK_IMAGE = ImageRecord(
    source="jwst-carina-nebula-default.png",
    title="JWST Carina Nebula",
    description=(
        "Stellar nursery showing star formation in unprecedented detail with infrared "
        "imaging revealing hidden structures and cosmic cliffs"
    ),
    resolution="4096×4096",
    pixel_scale=0.031,
    origin="James Webb Space Telescope",
    coordinates="10h 36m 41s, -59° 52' 04\"",
)

KNOWN_IMAGES: Dict[str, ImageRecord] = {
    record.key: record
    for record in (
        FALLBACK_IMAGE,
        ImageRecord(
            source="hubble-deep-field-default.png",
            title="Hubble Deep Field",
            description=(
                "Ultra-deep view revealing thousands of distant galaxies of various shapes, "
                "sizes, colors, and evolutionary stages across cosmic time"
            ),
            resolution="3200×3200",
            pixel_scale=0.05,
            origin="Hubble Space Telescope",
            coordinates="12h 36m 49s, +62° 12' 58\"",
        ),
        ImageRecord(
            source="crab-nebula-supernova-remnant.jpg",
            title="Crab Nebula",
            description="Supernova remnant expanding at 1,500 kilometers per second",
            resolution="2048×2048",
            pixel_scale=0.04,
            origin="Hubble Space Telescope",
        ),
        ImageRecord(
            source="saturn-rings-and-moons.jpg",
            title="Saturn System",
            description="High-resolution view of Saturn's rings and major moons from Cassini",
            resolution="1024×1024",
            pixel_scale=0.1,
            origin="Cassini",
        ),
    )
}


def metadata_for(source: str, default_pixel_scale: float = 0.1) -> ImageRecord:
    """Look up a known image by file name, or describe an unknown one."""
    record = KNOWN_IMAGES.get(source_key(source))
    if record is not None:
        return replace(record, source=source)
    return ImageRecord(
        source=source,
        title=source_key(source) or "Space Image",
        description="High-resolution astronomical image",
        pixel_scale=default_pixel_scale,
        origin="Web URL" if "://" in source else "Local file",
    )


def upload_record(name: str, source: str, pixel_scale: float = 0.1) -> ImageRecord:
    """Record for a user-supplied image."""
    return ImageRecord(
        source=source,
        title=name,
        description=f"Uploaded image: {name}",
        resolution="Calculating...",
        pixel_scale=pixel_scale,
        origin="User Upload",
    )


def parse_resolution(text: str) -> Optional[Tuple[int, int]]:
    """Parse "4096×4096" or "4096x4096" into (width, height)."""
    normalized = text.lower().replace("×", "x")
    parts = normalized.split("x")
    if len(parts) != 2:
        return None
    try:
        width, height = int(parts[0].strip()), int(parts[1].strip())
    except ValueError:
        return None
    if width <= 0 or height <= 0:
        return None
    return width, height
