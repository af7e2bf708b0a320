from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from yolov8_kit.types import Detection, Image

from .ingest import EncodedFrame

logger = logging.getLogger(__name__)

DetectFn = Callable[[Image], Sequence[Detection]]
Frame = Union[Image, EncodedFrame]
ProgressFn = Callable[["FrameResult"], None]


@dataclass(frozen=True)
class FrameOutcome:
    """
    Result of running the detector on one frame: either detections or a failure reason.
    """

    frame_index: int
    detections: Tuple[Detection, ...] = ()
    error: Optional[str] = None

    @classmethod
    def success(cls, frame_index: int, detections: Iterable[Detection]) -> "FrameOutcome":
        return cls(frame_index=frame_index, detections=tuple(detections))

    @classmethod
    def failure(cls, frame_index: int, reason: str) -> "FrameOutcome":
        return cls(frame_index=frame_index, error=reason)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class FrameResult:
    frame_index: int
    detections: Tuple[Detection, ...]


class FrameOrchestrator:
    """
    Run `detect` over frames one at a time, in order.

    Frames may be decoded images or JPEG-encoded frames, which are decoded
    just before detection. A frame that fails anywhere in that path (bad
    image, inference error, decode error) gets an empty detection list; the
    run continues and nothing is retried.
    """

    def __init__(self, detect: DetectFn, *, on_frame: Optional[ProgressFn] = None):
        self._detect = detect
        self._on_frame = on_frame

    def process_frame(self, frame_index: int, frame: Frame) -> FrameOutcome:
        try:
            image = frame.decode() if isinstance(frame, EncodedFrame) else frame
            detections = tuple(self._detect(image))
        except Exception as exc:
            return FrameOutcome.failure(frame_index, f"{type(exc).__name__}: {exc}")
        return FrameOutcome.success(frame_index, detections)

    def run(self, frames: Iterable[Frame]) -> List[FrameResult]:
        results: List[FrameResult] = []
        failed = 0
        for frame_index, frame in enumerate(frames):
            outcome = self.process_frame(frame_index, frame)
            if outcome.ok:
                logger.debug("Processed frame %d: found %d objects", frame_index, len(outcome.detections))
            else:
                failed += 1
                logger.warning("Frame %d failed, recording no detections: %s", frame_index, outcome.error)

            result = FrameResult(frame_index=frame_index, detections=outcome.detections)
            results.append(result)
            if self._on_frame is not None:
                self._on_frame(result)

        logger.info("Processed %d frames (%d failed)", len(results), failed)
        return results
