from __future__ import annotations

import logging
import math
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import cv2
import numpy as np

from yolov8_kit.errors import InvalidImage
from yolov8_kit.types import Image

from .errors import ExtractionFailure

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

JPEG_QUALITY = 95


@dataclass(frozen=True)
class CaptureInfo:
    fps: Optional[float]
    frame_count: Optional[int]


@dataclass(frozen=True)
class EncodedFrame:
    """
    One sampled frame kept as JPEG bytes until it is needed.
    """

    time_s: float
    jpeg: bytes

    def decode(self) -> Image:
        buf = np.frombuffer(self.jpeg, dtype=np.uint8)
        frame = cv2.imdecode(buf, cv2.IMREAD_COLOR) if buf.size else None
        if frame is None:
            raise InvalidImage(f"Could not decode frame at t={self.time_s:.2f}s")
        return Image.from_bgr(frame)


def get_capture_info(cap: cv2.VideoCapture) -> CaptureInfo:
    fps = cap.get(cv2.CAP_PROP_FPS)
    fps_val = float(fps) if fps and fps > 0 else None

    n = cap.get(cv2.CAP_PROP_FRAME_COUNT)
    n_val = int(n) if n and n > 0 else None

    return CaptureInfo(fps=fps_val, frame_count=n_val)


def _frame_time_s(*, frame_idx: int, fps: Optional[float], pos_msec: float) -> Optional[float]:
    if fps and fps > 0:
        return float(frame_idx) / float(fps)
    if pos_msec and pos_msec > 0:
        return float(pos_msec) / 1000.0
    return None


class FrameSampler:
    """
    Keep the first frame at or after each multiple of 1/sample_fps seconds.

    Frames without a usable timestamp are always kept.
    """

    def __init__(self, sample_fps: float = 1.0):
        if sample_fps <= 0:
            raise ValueError("sample_fps must be > 0")
        self.interval = 1.0 / float(sample_fps)
        self._next_t = 0.0

    def accept(self, time_s: Optional[float]) -> bool:
        if time_s is None:
            return True
        if time_s + 1e-9 < self._next_t:
            return False
        self._next_t = (math.floor(time_s / self.interval + 1e-9) + 1) * self.interval
        return True


def _encode_jpeg(frame_bgr: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".jpg", frame_bgr, [int(cv2.IMWRITE_JPEG_QUALITY), JPEG_QUALITY])
    if not ok:
        raise ExtractionFailure("Failed to encode sampled frame")
    return buf.tobytes()


def extract_frames_from_path(path: PathLike, sample_fps: float = 1.0) -> List[EncodedFrame]:
    """
    Decode a video file and return sampled frames, JPEG-encoded, in presentation order.

    Raises:
        ExtractionFailure: the file cannot be opened as a video or yields no frames.
    """

    path = Path(path)
    sampler = FrameSampler(sample_fps)
    cap = cv2.VideoCapture(str(path))
    try:
        if not cap.isOpened():
            raise ExtractionFailure(f"Failed to open video: {path.name}")
        info = get_capture_info(cap)

        frames: List[EncodedFrame] = []
        frame_idx = 0
        while True:
            ok, frame = cap.read()
            if not ok or frame is None:
                break
            t_s = _frame_time_s(frame_idx=frame_idx, fps=info.fps, pos_msec=cap.get(cv2.CAP_PROP_POS_MSEC))
            if sampler.accept(t_s):
                frames.append(EncodedFrame(time_s=t_s if t_s is not None else 0.0, jpeg=_encode_jpeg(frame)))
            frame_idx += 1
    finally:
        cap.release()

    if not frames:
        raise ExtractionFailure(f"No frames decoded from video: {path.name}")

    logger.info(
        "Extracted %d frames from %d decoded (reported frame_count=%s fps=%s)",
        len(frames),
        frame_idx,
        info.frame_count,
        info.fps,
    )
    return frames


def extract_frames(video_bytes: bytes, sample_fps: float = 1.0, *, suffix: str = ".mp4") -> List[EncodedFrame]:
    """
    Decode an in-memory video. The bytes are staged in a temporary directory that is
    removed before returning, whether extraction succeeded or not.
    """

    if not video_bytes:
        raise ExtractionFailure("No video data")

    with tempfile.TemporaryDirectory(prefix="video_detect_") as tmp:
        video_path = Path(tmp) / f"upload{suffix}"
        video_path.write_bytes(video_bytes)
        return extract_frames_from_path(video_path, sample_fps=sample_fps)
