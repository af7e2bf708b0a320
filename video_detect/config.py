from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

DEFAULT_MAX_VIDEO_BYTES = 50 * 1024 * 1024


@dataclass(frozen=True)
class DetectConfig:
    schema_version: int = 1
    model: Optional[str] = None
    onnx_providers: Optional[Tuple[str, ...]] = None
    sample_fps: float = 1.0
    conf_threshold: float = 0.5
    iou_threshold: float = 0.7
    max_video_bytes: int = DEFAULT_MAX_VIDEO_BYTES

    def __post_init__(self) -> None:
        if self.schema_version != 1:
            raise ValueError("detect config schema_version must be 1")
        if self.sample_fps <= 0:
            raise ValueError("sample_fps must be > 0")
        if not 0.0 < self.conf_threshold <= 1.0:
            raise ValueError("conf_threshold must be in (0, 1]")
        if not 0.0 < self.iou_threshold <= 1.0:
            raise ValueError("iou_threshold must be in (0, 1]")
        if self.max_video_bytes <= 0:
            raise ValueError("max_video_bytes must be > 0")


def _optional_number(payload: Dict[str, Any], key: str, default: float) -> float:
    if key not in payload:
        return default
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _optional_int(payload: Dict[str, Any], key: str, default: int) -> int:
    if key not in payload:
        return default
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return int(value)


def _optional_providers(payload: Dict[str, Any]) -> Optional[Tuple[str, ...]]:
    value = payload.get("onnx_providers")
    if value is None:
        return None
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError("onnx_providers must be a string or list of strings")
    cleaned = [item.strip() for item in value]
    if not cleaned or any(not item for item in cleaned):
        raise ValueError("onnx_providers must not contain empty strings")
    return tuple(cleaned)


def load_detect_config(path: Path) -> DetectConfig:
    if not path.exists():
        raise FileNotFoundError(f"Detect config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid detect config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Detect config must be a JSON object")

    allowed = {
        "schema_version",
        "model",
        "onnx_providers",
        "sample_fps",
        "conf_threshold",
        "iou_threshold",
        "max_video_bytes",
    }
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ValueError(f"Unknown detect config keys: {unknown}")

    model = payload.get("model")
    if model is not None and (not isinstance(model, str) or not model.strip()):
        raise ValueError("model must be a non-empty string if provided")

    return DetectConfig(
        schema_version=_optional_int(payload, "schema_version", 1),
        model=model.strip() if model is not None else None,
        onnx_providers=_optional_providers(payload),
        sample_fps=_optional_number(payload, "sample_fps", 1.0),
        conf_threshold=_optional_number(payload, "conf_threshold", 0.5),
        iou_threshold=_optional_number(payload, "iou_threshold", 0.7),
        max_video_bytes=_optional_int(payload, "max_video_bytes", DEFAULT_MAX_VIDEO_BYTES),
    )
