import unittest

import cv2
import numpy as np

from video_detect.ingest import EncodedFrame
from video_detect.orchestrator import FrameOrchestrator, FrameOutcome, FrameResult
from yolov8_kit.errors import InferenceFailure, InvalidImage
from yolov8_kit.types import Detection, Image


def _frame(tag: int) -> Image:
    return Image(width=1, height=1, data=bytes([tag, tag, tag]))


def _det(score: float) -> Detection:
    return Detection(x1=0.0, y1=0.0, x2=1.0, y2=1.0, label="person", score=score, class_id=0)


class TestFrameOrchestrator(unittest.TestCase):
    def test_failed_frame_becomes_empty(self) -> None:
        def detect(image: Image):
            tag = image.data[0]
            if tag == 2:
                raise InferenceFailure("engine exploded")
            return [_det(tag / 10.0)]

        with self.assertLogs("video_detect.orchestrator", level="WARNING") as logs:
            results = FrameOrchestrator(detect).run([_frame(1), _frame(2), _frame(3)])

        self.assertEqual(len(results), 3)
        self.assertEqual([r.frame_index for r in results], [0, 1, 2])
        self.assertEqual(results[0].detections, (_det(0.1),))
        self.assertEqual(results[1].detections, ())
        self.assertEqual(results[2].detections, (_det(0.3),))
        self.assertIn("Frame 1 failed", logs.output[0])
        self.assertIn("engine exploded", logs.output[0])

    def test_every_failure_kind_is_isolated(self) -> None:
        errors = [InvalidImage("bad"), InferenceFailure("bad"), ValueError("bad"), KeyError("bad")]

        def detect(image: Image):
            raise errors[image.data[0]]

        with self.assertLogs("video_detect.orchestrator", level="WARNING"):
            results = FrameOrchestrator(detect).run([_frame(i) for i in range(len(errors))])
        self.assertEqual([r.detections for r in results], [()] * len(errors))

    def test_lazy_detections_failing_late_are_isolated(self) -> None:
        def detect(image: Image):
            tag = image.data[0]
            yield _det(tag / 10.0)
            if tag == 2:
                raise InferenceFailure("late failure")

        with self.assertLogs("video_detect.orchestrator", level="WARNING") as logs:
            results = FrameOrchestrator(detect).run([_frame(1), _frame(2), _frame(3)])

        self.assertEqual([r.detections for r in results], [(_det(0.1),), (), (_det(0.3),)])
        self.assertIn("late failure", logs.output[0])

    def test_none_from_detect_is_isolated(self) -> None:
        with self.assertLogs("video_detect.orchestrator", level="WARNING"):
            results = FrameOrchestrator(lambda image: None).run([_frame(0)])
        self.assertEqual(results, [FrameResult(0, ())])

    def test_encoded_frames_are_decoded_per_frame(self) -> None:
        bgr = np.zeros((8, 8, 3), dtype=np.uint8)
        ok, buf = cv2.imencode(".jpg", bgr)
        self.assertTrue(ok)
        frames = [EncodedFrame(0.0, buf.tobytes()), EncodedFrame(1.0, b"not a jpeg"), EncodedFrame(2.0, b"")]
        sizes = []

        def detect(image: Image):
            sizes.append((image.width, image.height))
            return [_det(0.9)]

        with self.assertLogs("video_detect.orchestrator", level="WARNING") as logs:
            results = FrameOrchestrator(detect).run(frames)

        self.assertEqual(sizes, [(8, 8)])
        self.assertEqual([len(r.detections) for r in results], [1, 0, 0])
        self.assertIn("InvalidImage", logs.output[0])

    def test_frames_processed_in_order_once(self) -> None:
        seen = []

        def detect(image: Image):
            seen.append(image.data[0])
            raise InferenceFailure("no retry expected")

        with self.assertLogs("video_detect.orchestrator", level="WARNING"):
            FrameOrchestrator(detect).run([_frame(5), _frame(3), _frame(9)])
        self.assertEqual(seen, [5, 3, 9])

    def test_empty_sequence(self) -> None:
        self.assertEqual(FrameOrchestrator(lambda image: []).run([]), [])

    def test_zero_detection_frames_are_kept(self) -> None:
        results = FrameOrchestrator(lambda image: []).run(iter([_frame(0), _frame(1)]))
        self.assertEqual(results, [FrameResult(0, ()), FrameResult(1, ())])

    def test_on_frame_callback(self) -> None:
        received = []
        FrameOrchestrator(lambda image: [], on_frame=received.append).run([_frame(0), _frame(1)])
        self.assertEqual([r.frame_index for r in received], [0, 1])

    def test_process_frame_outcome(self) -> None:
        orch = FrameOrchestrator(lambda image: [_det(0.9)])
        outcome = orch.process_frame(4, _frame(0))
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome, FrameOutcome.success(4, [_det(0.9)]))

        failing = FrameOrchestrator(lambda image: 1 / 0)
        outcome = failing.process_frame(0, _frame(0))
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.detections, ())
        self.assertIn("ZeroDivisionError", outcome.error)


if __name__ == "__main__":
    unittest.main()
