from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .config import DEFAULT_MAX_VIDEO_BYTES
from .errors import ExtractionFailure
from .ingest import extract_frames
from .orchestrator import DetectFn, Frame, FrameOrchestrator, FrameResult, ProgressFn

logger = logging.getLogger(__name__)

FrameSource = Callable[[bytes, float], List[Frame]]


def detect_objects_in_video(
    video_bytes: bytes,
    detect: DetectFn,
    *,
    sample_fps: float = 1.0,
    frame_source: FrameSource = extract_frames,
    max_video_bytes: int = DEFAULT_MAX_VIDEO_BYTES,
    on_frame: Optional[ProgressFn] = None,
) -> List[FrameResult]:
    """
    Detect objects in every sampled frame of one video.

    All frames are extracted before detection starts. Extraction problems raise
    `ExtractionFailure` with no partial result; per-frame problems only empty
    that frame's detections.
    """

    if len(video_bytes) > max_video_bytes:
        raise ExtractionFailure(f"Video is {len(video_bytes)} bytes, limit is {max_video_bytes}")

    logger.info("Processing video (%d bytes)", len(video_bytes))
    frames = frame_source(video_bytes, sample_fps)
    logger.info("Found %d frames to process", len(frames))

    return FrameOrchestrator(detect, on_frame=on_frame).run(frames)
