"""Fixed catalog of synthetic detection archetypes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

__all__ = [
    "Category",
    "Rarity",
    "Archetype",
    "ARCHETYPES",
    "CATEGORY_SIZE_MULTIPLIER",
    "RARITY_THRESHOLDS",
    "rarity_for_draw",
]


class Category(str, Enum):
    GALAXY = "galaxy"
    NEBULA = "nebula"
    STAR = "star"
    PLANET = "planet"
    EXOTIC = "exotic"
    UNKNOWN = "unknown"


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"


@dataclass(frozen=True)
class Archetype:
    """One kind of object the sampler can report.

    Parameters
    ----------
    type : str
        Display label, unique within the catalog.
    base_confidence : float
        Confidence before per-run variance is applied.
    color : str
        Hex color used for the overlay box.
    description : str
        One-line explanation shown in the detail view.
    category, rarity : Category, Rarity
        Classification driving size, metadata and selection weight.
    """

    type: str
    base_confidence: float
    color: str
    description: str
    category: Category
    rarity: Rarity


# Upper bounds of the uniform draw per bucket, checked in order.
RARITY_THRESHOLDS: Tuple[Tuple[float, Rarity], ...] = (
    (0.5, Rarity.COMMON),
    (0.8, Rarity.UNCOMMON),
    (1.0, Rarity.RARE),
)

CATEGORY_SIZE_MULTIPLIER: Dict[Category, float] = {
    Category.GALAXY: 1.2,
    Category.NEBULA: 1.5,
    Category.STAR: 0.8,
    Category.PLANET: 0.6,
    Category.EXOTIC: 1.0,
    Category.UNKNOWN: 0.9,
}


def rarity_for_draw(draw: float) -> Rarity:
    """Map a uniform draw in [0, 1) to a rarity bucket."""
    for upper, rarity in RARITY_THRESHOLDS:
        if draw < upper:
            return rarity
    return Rarity.RARE


ARCHETYPES: Tuple[Archetype, ...] = (
    Archetype(
        "Spiral Galaxy (Sb-type)", 0.96, "#3b82f6",
        "Spiral galaxy with prominent arms and active star formation",
        Category.GALAXY, Rarity.COMMON,
    ),
    Archetype(
        "Elliptical Galaxy (E4)", 0.94, "#8b5cf6",
        "Elliptical galaxy with older stellar population",
        Category.GALAXY, Rarity.COMMON,
    ),
    Archetype(
        "Galaxy Cluster (Rich)", 0.95, "#3b82f6",
        "Gravitationally bound collection of hundreds of galaxies",
        Category.GALAXY, Rarity.UNCOMMON,
    ),
    Archetype(
        "Gravitational Lens System", 0.93, "#ef4444",
        "Massive foreground object creating Einstein ring or arc",
        Category.EXOTIC, Rarity.RARE,
    ),
    Archetype(
        "Star Formation Region (HII)", 0.92, "#06d6a0",
        "Active stellar nursery with ionized hydrogen emission",
        Category.NEBULA, Rarity.COMMON,
    ),
    Archetype(
        "Planetary Nebula", 0.91, "#10b981",
        "Expanding shell of gas from dying intermediate-mass star",
        Category.NEBULA, Rarity.UNCOMMON,
    ),
    Archetype(
        "Supernova Remnant", 0.89, "#ec4899",
        "Expanding debris field from stellar explosion",
        Category.NEBULA, Rarity.UNCOMMON,
    ),
    Archetype(
        "Protoplanetary Disk", 0.88, "#8b5cf6",
        "Circumstellar disk of gas and dust around young star",
        Category.STAR, Rarity.UNCOMMON,
    ),
    Archetype(
        "Brown Dwarf Candidate", 0.85, "#f59e0b",
        "Sub-stellar object with mass below hydrogen fusion threshold",
        Category.STAR, Rarity.RARE,
    ),
    Archetype(
        "Binary Star System", 0.87, "#fbbf24",
        "Two stars orbiting common center of mass",
        Category.STAR, Rarity.COMMON,
    ),
    Archetype(
        "Quasar (Active AGN)", 0.82, "#ef4444",
        "Extremely luminous active galactic nucleus at high redshift",
        Category.EXOTIC, Rarity.RARE,
    ),
    Archetype(
        "Pulsar Wind Nebula", 0.84, "#06b6d4",
        "Nebula powered by relativistic wind from pulsar",
        Category.EXOTIC, Rarity.RARE,
    ),
    Archetype(
        "Exoplanet Transit Signature", 0.78, "#10b981",
        "Periodic dimming indicating planet crossing host star",
        Category.PLANET, Rarity.UNCOMMON,
    ),
    Archetype(
        "Dark Nebula (Molecular Cloud)", 0.86, "#6b7280",
        "Dense cloud of gas and dust blocking background light",
        Category.NEBULA, Rarity.COMMON,
    ),
    Archetype(
        "Herbig-Haro Object", 0.81, "#f59e0b",
        "Shock wave from jets of young stellar object",
        Category.STAR, Rarity.RARE,
    ),
    Archetype(
        "Globular Cluster", 0.90, "#fbbf24",
        "Spherical collection of ancient stars orbiting galaxy",
        Category.STAR, Rarity.UNCOMMON,
    ),
    Archetype(
        "Unknown Anomaly", 0.65, "#6b7280",
        "Unidentified celestial phenomenon requiring expert review",
        Category.UNKNOWN, Rarity.RARE,
    ),
)
