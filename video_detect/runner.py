from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from tqdm import tqdm

from yolov8_kit import DecoderConfig, NMSConfig, load_pipeline

from .config import DetectConfig, load_detect_config
from .errors import ExtractionFailure
from .logs import setup_logging
from .reporting import encode_results, write_results_json
from .service import detect_objects_in_video

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "yolov8m.onnx"


def _sanitize_ort_provider_name(name: str) -> str:
    # Shell line continuations and copy/paste can leave stray backticks/quotes.
    return str(name).strip().strip("'\"`")


def _parse_ort_providers(raw: Optional[str]) -> Optional[List[str]]:
    if raw is None:
        return None
    parts: List[str] = []
    for p in str(raw).split(","):
        cleaned = _sanitize_ort_provider_name(p)
        if cleaned:
            parts.append(cleaned)
    return parts or None


def _resolve(cli_value: Any, config_value: Any, default_value: Any) -> Any:
    if cli_value is not None:
        return cli_value
    if config_value is not None:
        return config_value
    return default_value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Detect objects in a video: samples frames (1/s by default), runs a YOLOv8 ONNX model "
            "on each and writes per-frame [x1, y1, x2, y2, label, confidence] rows as JSON."
        )
    )
    parser.add_argument("--video", required=True, help="Path to input video.")
    parser.add_argument("--config", default=None, help="Optional detect config JSON.")
    parser.add_argument("--model", default=None, help=f"Path to YOLOv8 .onnx model (default: {DEFAULT_MODEL}).")
    parser.add_argument(
        "--onnx-providers",
        default=None,
        help='Comma-separated ORT providers, e.g. "CUDAExecutionProvider,CPUExecutionProvider".',
    )
    parser.add_argument("--sample-fps", type=float, default=None, help="Frames sampled per second of video.")
    parser.add_argument("--conf", type=float, default=None, help="Confidence threshold.")
    parser.add_argument("--iou", type=float, default=None, help="IoU threshold for NMS.")
    parser.add_argument("--out", default=None, help="Output JSON path (default: print to stdout).")
    parser.add_argument("--progress", action="store_true", help="Show a per-frame progress bar.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...).")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")
    return parser


def resolve_config(args: argparse.Namespace) -> DetectConfig:
    """
    Merge CLI flags over the optional config file over built-in defaults.
    """

    file_cfg = load_detect_config(Path(args.config)) if args.config else DetectConfig()
    defaults = DetectConfig()

    providers = _parse_ort_providers(args.onnx_providers)
    return DetectConfig(
        model=_resolve(args.model, file_cfg.model, DEFAULT_MODEL),
        onnx_providers=tuple(providers) if providers else file_cfg.onnx_providers,
        sample_fps=float(_resolve(args.sample_fps, file_cfg.sample_fps, defaults.sample_fps)),
        conf_threshold=float(_resolve(args.conf, file_cfg.conf_threshold, defaults.conf_threshold)),
        iou_threshold=float(_resolve(args.iou, file_cfg.iou_threshold, defaults.iou_threshold)),
        max_video_bytes=file_cfg.max_video_bytes,
    )


def run(args: argparse.Namespace) -> int:
    cfg = resolve_config(args)

    video = Path(args.video)
    if not video.exists():
        raise FileNotFoundError(f"Video not found: {video}")

    pipeline = load_pipeline(
        model_path=cfg.model,
        decoder_cfg=DecoderConfig(conf_threshold=cfg.conf_threshold),
        nms_cfg=NMSConfig(iou_threshold=cfg.iou_threshold),
        onnx_providers=cfg.onnx_providers,
    )

    pbar = tqdm(unit="frame", desc="detect") if args.progress else None
    try:
        results = detect_objects_in_video(
            video.read_bytes(),
            pipeline,
            sample_fps=cfg.sample_fps,
            max_video_bytes=cfg.max_video_bytes,
            on_frame=(lambda _result: pbar.update(1)) if pbar is not None else None,
        )
    finally:
        if pbar is not None:
            pbar.close()

    run_config: Dict[str, Any] = asdict(cfg)
    run_config["video"] = str(video)
    if pipeline.backend is not None and hasattr(pipeline.backend, "providers_in_use"):
        run_config["onnx_providers_in_use"] = list(getattr(pipeline.backend, "providers_in_use"))

    if args.out:
        out_path = write_results_json(path=Path(args.out), results=results, run_config=run_config)
        print(f"Wrote results: {out_path}")
    else:
        json.dump(encode_results(results), sys.stdout)
        sys.stdout.write("\n")

    frames_with_hits = sum(1 for r in results if r.detections)
    print(f"Frames: {len(results)} (with detections: {frames_with_hits})", file=sys.stderr)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        setup_logging(args.log_level, args.log_file)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    try:
        return run(args)
    except ExtractionFailure as exc:
        logger.error("Error processing video: %s", exc)
        return 2
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
