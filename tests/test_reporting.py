import json
import tempfile
import unittest
from pathlib import Path

from video_detect.orchestrator import FrameResult
from video_detect.reporting import encode_detection, encode_results, write_results_json
from yolov8_kit.types import Detection

PERSON = Detection(x1=270.0, y1=220.0, x2=370.0, y2=420.0, label="person", score=0.9, class_id=0)
CAR = Detection(x1=1.5, y1=2.5, x2=30.0, y2=40.0, label="car", score=0.55, class_id=2)


class TestReporting(unittest.TestCase):
    def test_encode_detection(self) -> None:
        self.assertEqual(encode_detection(PERSON), [270.0, 220.0, 370.0, 420.0, "person", 0.9])

    def test_encode_results_keeps_empty_frames_in_order(self) -> None:
        results = [FrameResult(1, ()), FrameResult(0, (PERSON, CAR)), FrameResult(2, (CAR,))]
        encoded = encode_results(results)
        self.assertEqual(len(encoded), 3)
        self.assertEqual([len(f) for f in encoded], [2, 0, 1])
        self.assertEqual(encoded[0][1][4], "car")

    def test_write_bare_frames(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = write_results_json(path=Path(tmp) / "out" / "results.json", results=[FrameResult(0, (PERSON,))])
            payload = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(payload, [[[270.0, 220.0, 370.0, 420.0, "person", 0.9]]])

    def test_write_with_run_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = write_results_json(
                path=Path(tmp) / "results.json",
                results=[FrameResult(0, ())],
                run_config={"sample_fps": 1.0},
            )
            payload = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(payload["frames"], [[]])
        self.assertEqual(payload["run_config"], {"sample_fps": 1.0})


if __name__ == "__main__":
    unittest.main()
