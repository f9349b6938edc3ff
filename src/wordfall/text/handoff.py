from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from wordfall.log import get_logger
from wordfall.text.layout import Word

logger = get_logger(__name__)


@dataclass(frozen=True)
class Wall:
    x_center: float
    y_center: float
    width: float
    height: float


@dataclass(frozen=True)
class HandoffWord:
    x_min: float
    y_max: float
    width: float
    height: float
    text: str


@dataclass
class Handoff:
    """Everything the animation side needs to take over the typed words."""

    surface_size: Tuple[int, int]
    walls: List[Wall] = field(default_factory=list)
    words: List[HandoffWord] = field(default_factory=list)


def build_walls(surface_width: float, surface_height: float, *, thickness: float = 10, margin: float = 100) -> List[Wall]:
    return [
        # Floor just above the lower edge.
        Wall(surface_width / 2, surface_height - margin, surface_width, thickness),
        Wall(margin, surface_height / 2, thickness, surface_height),
        Wall(surface_width - margin, surface_height / 2, thickness, surface_height),
    ]


def build_handoff(
    words: Sequence[Word],
    surface_width: int,
    surface_height: int,
    *,
    wall_thickness: float = 10,
    wall_margin: float = 100,
) -> Handoff:
    return Handoff(
        surface_size=(surface_width, surface_height),
        walls=build_walls(surface_width, surface_height, thickness=wall_thickness, margin=wall_margin),
        words=[
            HandoffWord(x_min=w.origin_x, y_max=w.y_max, width=w.width, height=w.height, text=w.text)
            for w in words
        ],
    )


def _handoff_record(handoff: Handoff, timestamp: str) -> dict:
    return {
        "timestamp": timestamp,
        "surface_size": list(handoff.surface_size),
        "walls": [asdict(wall) for wall in handoff.walls],
        "words": [asdict(word) for word in handoff.words],
    }


def archive_handoff(handoff: Handoff, path: Path, *, now: Optional[datetime] = None) -> bool:
    timestamp = (now or datetime.now()).isoformat(timespec="seconds")
    record = _handoff_record(handoff, timestamp)
    try:
        with path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False) + "\n")
    except OSError as exc:
        logger.warning("Could not archive hand-off to %s: %s", path, exc)
        return False
    return True
