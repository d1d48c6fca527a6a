"""Guard against Qt imports in core modules.

Run this script in CI or locally to ensure the viewport core stays usable
without a GUI toolkit.
"""

from __future__ import annotations

from pathlib import Path
import sys


CORE_MODULES = [
    "src/cosmozoom/viewport_state.py",
    "src/cosmozoom/coordinate_transforms.py",
    "src/cosmozoom/zoom_controller.py",
    "src/cosmozoom/detection_catalog.py",
    "src/cosmozoom/detection_sampler.py",
    "src/cosmozoom/analysis_jobs.py",
    "src/cosmozoom/overlay_projector.py",
    "src/cosmozoom/session.py",
]

FORBIDDEN = ("PyQt", "PySide", "QtCore", "QtWidgets")


def find_violations(root: Path) -> list[str]:
    bad = []
    for rel in CORE_MODULES:
        path = root / rel
        if not path.exists():
            bad.append(f"{rel} is missing")
            continue
        text = path.read_text(encoding="utf-8", errors="ignore")
        for token in FORBIDDEN:
            if token in text:
                bad.append(f"{rel} contains '{token}'")
                break
    return bad


def main() -> int:
    bad = find_violations(Path(__file__).resolve().parent.parent)
    if bad:
        sys.stderr.write("Qt import guard failed:\n")
        sys.stderr.write("\n".join(bad))
        sys.stderr.write("\n")
        return 2
    print("Qt import guard passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
