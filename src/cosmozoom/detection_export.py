"""Tabular export of detection batches.

Conventions
-----------
- One row per detection; position/size are flattened to percent columns.
- CSV files may start with a ``# cosmozoom:`` comment line holding JSON meta.
- JSON files group detections by image key.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from cosmozoom.detection_catalog import Category, Rarity
from cosmozoom.detection_sampler import Detection, DetectionMetadata

__all__ = [
    "DETECTION_COLUMNS",
    "detections_to_dataframe",
    "save_detections_csv",
    "save_detections_json",
    "detections_from_json",
]

METADATA_FIELDS = [
    "brightness",
    "temperature",
    "redshift",
    "angular_size",
    "distance",
    "mass",
    "spectral_type",
]

DETECTION_COLUMNS = [
    "id",
    "image_key",
    "type",
    "description",
    "category",
    "rarity",
    "confidence",
    "x_pct",
    "y_pct",
    "width_pct",
    "height_pct",
    "color",
    "timestamp",
] + METADATA_FIELDS


def _to_row(detection: Detection) -> Dict[str, object]:
    row: Dict[str, object] = {
        "id": detection.id,
        "image_key": detection.image_key,
        "type": detection.type,
        "description": detection.description,
        "category": detection.category.value,
        "rarity": detection.rarity.value,
        "confidence": detection.confidence,
        "x_pct": detection.position[0],
        "y_pct": detection.position[1],
        "width_pct": detection.size[0],
        "height_pct": detection.size[1],
        "color": detection.color,
        "timestamp": detection.timestamp,
    }
    row.update(asdict(detection.metadata))
    return row


def detections_to_dataframe(detections: Iterable[Detection]) -> pd.DataFrame:
    """Convert detections to a DataFrame with :data:`DETECTION_COLUMNS`."""
    rows = [_to_row(d) for d in detections]
    if not rows:
        return pd.DataFrame(columns=DETECTION_COLUMNS)
    return pd.DataFrame(rows, columns=DETECTION_COLUMNS)


def save_detections_csv(detections: Iterable[Detection], path: Path, meta: Optional[dict] = None) -> None:
    df = detections_to_dataframe(detections)
    with Path(path).open("w", encoding="utf-8", newline="") as handle:
        if meta:
            handle.write(f"# cosmozoom: {json.dumps(meta)}\n")
        df.to_csv(handle, index=False)


def save_detections_json(detections: Iterable[Detection], path: Path, meta: Optional[dict] = None) -> None:
    """Write detections to JSON grouped by image key."""
    grouped: Dict[str, List[Dict[str, object]]] = {}
    for detection in detections:
        grouped.setdefault(detection.image_key, []).append(_to_row(detection))
    payload: Dict[str, object] = {"detections": grouped}
    if meta:
        payload["meta"] = meta
    Path(path).write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def detections_from_json(path: Path) -> List[Detection]:
    """Load detections written by :func:`save_detections_json`."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    grouped = data.get("detections", {}) if isinstance(data, dict) else {}
    detections: List[Detection] = []
    for image_key, rows in grouped.items():
        for row in rows:
            detections.append(
                Detection(
                    id=str(row["id"]),
                    type=str(row["type"]),
                    description=str(row.get("description", "")),
                    category=Category(row["category"]),
                    rarity=Rarity(row["rarity"]),
                    confidence=float(row["confidence"]),
                    position=(float(row["x_pct"]), float(row["y_pct"])),
                    size=(float(row["width_pct"]), float(row["height_pct"])),
                    color=str(row.get("color", "")),
                    metadata=DetectionMetadata(
                        brightness=int(row["brightness"]),
                        **{key: str(row[key]) for key in METADATA_FIELDS if key != "brightness"},
                    ),
                    timestamp=str(row.get("timestamp", "")),
                    image_key=str(row.get("image_key", image_key)),
                )
            )
    return detections
