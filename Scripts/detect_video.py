from __future__ import annotations

import sys
from pathlib import Path

# Allow `python Scripts/detect_video.py ...` from a checkout without installing.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from video_detect.runner import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main())
