import logging
import tempfile
import unittest
from pathlib import Path

from video_detect.runner import main


class TestRunnerExitCodes(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level

        def _restore() -> None:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

        self.addCleanup(_restore)

        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.tmp = Path(tmpdir.name)

    def test_missing_video(self) -> None:
        missing = self.tmp / "nope.mp4"
        with self.assertLogs("video_detect.runner", level="ERROR") as logs:
            code = main(["--video", str(missing), "--log-level", "CRITICAL"])
        self.assertEqual(code, 1)
        self.assertIn("Video not found", logs.output[0])

    def test_missing_model(self) -> None:
        video = self.tmp / "clip.mp4"
        video.write_bytes(b"\x00" * 16)
        model = self.tmp / "absent.onnx"
        with self.assertLogs("video_detect.runner", level="ERROR") as logs:
            code = main(["--video", str(video), "--model", str(model), "--log-level", "CRITICAL"])
        self.assertEqual(code, 1)
        self.assertIn("absent.onnx", logs.output[0])

    def test_wrong_model_format(self) -> None:
        video = self.tmp / "clip.mp4"
        video.write_bytes(b"\x00" * 16)
        with self.assertLogs("video_detect.runner", level="ERROR"):
            code = main(["--video", str(video), "--model", str(self.tmp / "model.pt"), "--log-level", "CRITICAL"])
        self.assertEqual(code, 1)

    def test_unknown_log_level(self) -> None:
        code = main(["--video", str(self.tmp / "clip.mp4"), "--log-level", "LOUD"])
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
