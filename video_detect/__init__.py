"""
Video object detection built on top of `yolov8_kit`.

`yolov8_kit` owns the per-image work (tensor, decode, NMS); this package owns
the per-video work:
- frame extraction (one frame per second by default)
- ordered per-frame processing with per-frame fault isolation
- result encoding, configuration and the `video-detect` CLI
"""

from __future__ import annotations

from .config import DetectConfig, load_detect_config
from .errors import ExtractionFailure, InferenceFailure, InvalidImage
from .ingest import EncodedFrame, FrameSampler, extract_frames, extract_frames_from_path
from .orchestrator import FrameOrchestrator, FrameOutcome, FrameResult
from .reporting import encode_detection, encode_results, write_results_json
from .service import detect_objects_in_video

__all__ = [
    "DetectConfig",
    "load_detect_config",
    "ExtractionFailure",
    "InferenceFailure",
    "InvalidImage",
    "EncodedFrame",
    "FrameSampler",
    "extract_frames",
    "extract_frames_from_path",
    "FrameOrchestrator",
    "FrameOutcome",
    "FrameResult",
    "encode_detection",
    "encode_results",
    "write_results_json",
    "detect_objects_in_video",
]
