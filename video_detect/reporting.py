"""
JSON encoding of per-frame detections.

Each frame becomes an array of `[x1, y1, x2, y2, label, confidence]` rows; the
frames are listed in extraction order, empty frames included.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from yolov8_kit.types import Detection

from .orchestrator import FrameResult

Row = List[Union[float, str]]


def encode_detection(det: Detection) -> Row:
    return [float(det.x1), float(det.y1), float(det.x2), float(det.y2), str(det.label), float(det.score)]


def encode_results(results: Iterable[FrameResult]) -> List[List[Row]]:
    ordered = sorted(results, key=lambda r: r.frame_index)
    return [[encode_detection(d) for d in r.detections] for r in ordered]


def write_results_json(
    *,
    path: Path,
    results: Iterable[FrameResult],
    run_config: Optional[Dict[str, Any]] = None,
) -> Path:
    """
    Write encoded frames to `path`. With a run config the file is an object
    `{"frames": [...], "run_config": {...}}`, otherwise the bare frame array.
    """

    frames = encode_results(results)
    payload: Any = frames if run_config is None else {"frames": frames, "run_config": run_config}
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path
