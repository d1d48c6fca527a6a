"""Rarity-weighted sampling of synthetic detections.

The sampler draws a batch of plausible labeled regions over an image. It is
synthetic data generation with weighted selection, not model inference.

Conventions
-----------
- ``position`` and ``size`` are percentages of the image (0-100).
- A batch never repeats an archetype and is sorted by confidence, highest first.
- Randomness comes from an injectable ``numpy.random.Generator``; pass a seed
  for reproducible batches.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Set, Tuple, Union

import numpy as np

from cosmozoom.coordinate_transforms import round_half_up
from cosmozoom.detection_catalog import (
    ARCHETYPES,
    CATEGORY_SIZE_MULTIPLIER,
    Archetype,
    Category,
    Rarity,
    rarity_for_draw,
)
from cosmozoom.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = [
    "NOT_APPLICABLE",
    "SamplerError",
    "DetectionMetadata",
    "Detection",
    "DetectionSampler",
]

NOT_APPLICABLE = "N/A"
MIN_DETECTIONS = 5
MAX_DETECTIONS = 10
MAX_SELECTION_ATTEMPTS = 10
CONFIDENCE_RANGE = (0.55, 0.99)
CONFIDENCE_VARIANCE = 0.04
RARE_VARIANCE_BOOST = 1.5
# Keeps boxes away from the image border, in percent per side.
EDGE_MARGIN = 15.0
BASE_SIZE_RANGE = (4.0, 12.0)
ASPECT_JITTER = (0.8, 1.2)
SPECTRAL_CLASSES = ("O", "B", "A", "F", "G", "K", "M")

RngLike = Union[None, int, np.random.Generator]


class SamplerError(RuntimeError):
    """Raised when a batch cannot be produced at all (e.g., empty catalog)."""


@dataclass(frozen=True)
class DetectionMetadata:
    """Category-dependent descriptive values; ``"N/A"`` when inapplicable."""

    brightness: int
    temperature: str
    redshift: str
    angular_size: str
    distance: str
    mass: str
    spectral_type: str


@dataclass(frozen=True)
class Detection:
    """One synthetic detection, immutable once produced.

    Parameters
    ----------
    id : str
        Identifier unique within a batch.
    type, description, color : str
        Copied from the archetype.
    category, rarity : Category, Rarity
        Archetype classification.
    confidence : float
        Final confidence in ``[0.55, 0.99]``.
    position : tuple[float, float]
        (x, y) top-left corner in percent of the image.
    size : tuple[float, float]
        (width, height) in percent of the image.
    metadata : DetectionMetadata
        Sampled descriptive values.
    timestamp : str
        ISO-8601 creation time.
    image_key : str
        Identity of the image the batch was sampled for.
    """

    id: str
    type: str
    description: str
    category: Category
    rarity: Rarity
    confidence: float
    position: Tuple[float, float]
    size: Tuple[float, float]
    color: str
    metadata: DetectionMetadata
    timestamp: str = ""
    image_key: str = ""


class DetectionSampler:
    """Produce duplicate-free, rarity-weighted detection batches."""

    def __init__(
        self,
        catalog: Sequence[Archetype] = ARCHETYPES,
        rng: RngLike = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.catalog = tuple(catalog)
        self.rng = np.random.default_rng(rng)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _uniform(self, low: float, high: float) -> float:
        return float(low + self.rng.random() * (high - low))

    def _select(self, used: Set[str]) -> Optional[Archetype]:
        choice: Optional[Archetype] = None
        for _ in range(MAX_SELECTION_ATTEMPTS):
            draw = float(self.rng.random())
            available = [a for a in self.catalog if a.type not in used]
            if not available:
                return None
            bucket = rarity_for_draw(draw)
            choice = next((a for a in available if a.rarity == bucket), available[0])
            if choice.type not in used:
                return choice
        return None

    def _confidence(self, archetype: Archetype) -> float:
        variance = self._uniform(-CONFIDENCE_VARIANCE, CONFIDENCE_VARIANCE)
        if archetype.rarity == Rarity.RARE:
            variance *= RARE_VARIANCE_BOOST
        low, high = CONFIDENCE_RANGE
        return max(low, min(high, archetype.base_confidence + variance))

    def _metadata(self, category: Category) -> DetectionMetadata:
        brightness = round_half_up(self._uniform(100, 2100))
        temperature = f"{round_half_up(self._uniform(2000, 17000))}K"
        redshift = f"{self._uniform(0, 3):.4f}" if category == Category.GALAXY else NOT_APPLICABLE
        angular_size = f'{self._uniform(5, 125):.2f}"'
        if category == Category.GALAXY:
            distance = f"{self._uniform(10, 510):.1f} Mly"
        else:
            distance = f"{self._uniform(100, 5100):.0f} ly"
        if category == Category.STAR:
            mass = f"{self._uniform(0.1, 50.1):.2f} M☉"
        elif category == Category.GALAXY:
            mass = f"{self._uniform(10, 1010):.0f}B M☉"
        else:
            mass = NOT_APPLICABLE
        if category == Category.STAR:
            letter = SPECTRAL_CLASSES[int(self.rng.integers(0, len(SPECTRAL_CLASSES)))]
            spectral_type = f"{letter}{int(self.rng.integers(0, 10))}"
        else:
            spectral_type = NOT_APPLICABLE
        return DetectionMetadata(
            brightness=brightness,
            temperature=temperature,
            redshift=redshift,
            angular_size=angular_size,
            distance=distance,
            mass=mass,
            spectral_type=spectral_type,
        )

    def sample(self, image_key: str = "", count: Optional[int] = None) -> List[Detection]:
        """Draw a new batch of detections.

        Parameters
        ----------
        image_key : str
            Identity of the image being analysed; stored on each detection.
        count : int, optional
            Number of slots to fill. Defaults to a uniform draw in [5, 10].

        Returns
        -------
        list[Detection]
            Sorted by confidence, highest first. May hold fewer than
            ``count`` entries when the catalog runs out.
        """
        if not self.catalog:
            raise SamplerError("Detection catalog is empty")
        if count is None:
            count = int(self.rng.integers(MIN_DETECTIONS, MAX_DETECTIONS + 1))
        now = self._clock()
        stamp = int(now.timestamp() * 1000)
        used: Set[str] = set()
        detections: List[Detection] = []
        for slot in range(count):
            archetype = self._select(used)
            if archetype is None:
                continue
            used.add(archetype.type)
            confidence = self._confidence(archetype)
            span = 100.0 - 2 * EDGE_MARGIN
            pos_x = EDGE_MARGIN + float(self.rng.random()) * span
            pos_y = EDGE_MARGIN + float(self.rng.random()) * span
            multiplier = CATEGORY_SIZE_MULTIPLIER.get(archetype.category, 1.0)
            width = self._uniform(*BASE_SIZE_RANGE) * multiplier
            height = width * self._uniform(*ASPECT_JITTER)
            detections.append(
                Detection(
                    id=f"detection_{stamp}_{slot}",
                    type=archetype.type,
                    description=archetype.description,
                    category=archetype.category,
                    rarity=archetype.rarity,
                    confidence=confidence,
                    position=(pos_x, pos_y),
                    size=(width, height),
                    color=archetype.color,
                    metadata=self._metadata(archetype.category),
                    timestamp=now.isoformat(),
                    image_key=image_key,
                )
            )
        if len(detections) < count:
            LOGGER.debug("Catalog exhausted: %d of %d slots filled", len(detections), count)
        detections.sort(key=lambda d: d.confidence, reverse=True)
        return detections
