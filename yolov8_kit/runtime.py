from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import numpy as np

from .errors import InferenceFailure
from .nms import NMSConfig, Suppressor
from .postprocess import DecoderConfig, DetectionDecoder
from .preprocess import INPUT_SIZE, PreprocessResult, build_input_tensor
from .types import Detection, Image


PathLike = Union[str, Path]


def find_project_root(
    start: Optional[PathLike] = None,
    markers: Sequence[str] = ("pyproject.toml", ".git"),
) -> Path:
    """
    Best-effort project root discovery, used to resolve relative model paths.
    """

    p = Path(start) if start is not None else Path.cwd()
    p = p.resolve()

    if p.is_file():
        p = p.parent

    for parent in (p, *p.parents):
        for m in markers:
            if (parent / m).exists():
                return parent
    return p


def resolve_path(path: PathLike, root: Optional[PathLike] = "auto") -> Path:
    """
    Resolve `path` to an absolute Path.

    - Absolute paths are returned as-is.
    - Relative paths are resolved against `root` if provided, else the project root.
    """

    p = Path(path)
    if p.is_absolute():
        return p

    if root == "auto" or root is None:
        base = find_project_root()
    else:
        base = Path(root).resolve()

    return (base / p).resolve()


class DetectionPipeline:
    """
    Per-frame detector: fill resize -> inference -> decode -> class-agnostic NMS.

    `infer_fn` receives a (1, 3, 640, 640) float32 blob and returns the raw
    model output. Whatever it raises surfaces as `InferenceFailure`.
    """

    def __init__(
        self,
        infer_fn: Callable[[np.ndarray], np.ndarray],
        *,
        backend: Optional[object] = None,
        decoder_cfg: DecoderConfig = DecoderConfig(),
        nms_cfg: NMSConfig = NMSConfig(),
    ):
        self._infer_fn = infer_fn
        self.backend = backend
        self.decoder = DetectionDecoder(decoder_cfg)
        self.suppressor = Suppressor(nms_cfg)

    def preprocess(self, image: Image) -> PreprocessResult:
        tensor = build_input_tensor(image, self.decoder.cfg.input_size)
        return PreprocessResult(blob=tensor[None, ...], orig_size=(image.width, image.height))

    def infer(self, blob: np.ndarray) -> np.ndarray:
        try:
            preds = self._infer_fn(blob)
        except InferenceFailure:
            raise
        except Exception as e:
            raise InferenceFailure(f"Inference failed: {e}") from e
        if preds is None:
            raise InferenceFailure("Model output is invalid")
        return preds

    def __call__(self, image: Image) -> List[Detection]:
        prep = self.preprocess(image)
        preds = self.infer(prep.blob)
        candidates = self.decoder.decode(preds, orig_size=prep.orig_size)
        return self.suppressor.suppress(candidates)


def load_pipeline(
    model_path: PathLike,
    *,
    root: Optional[PathLike] = "auto",
    decoder_cfg: DecoderConfig = DecoderConfig(),
    nms_cfg: NMSConfig = NMSConfig(),
    onnx_providers: Optional[Sequence[str]] = None,
    onnx_input_name: Optional[str] = None,
    onnx_output_name: Optional[str] = None,
) -> DetectionPipeline:
    """
    Create a pipeline for a YOLOv8 ONNX export on disk.

        pipe = load_pipeline("models/yolov8m.onnx")  # resolves from project root by default

    Args:
        model_path: path to the .onnx file; relative paths resolve against project root by default
        root: base directory for resolving relative model paths ("auto" uses best-effort project root)
    """

    if decoder_cfg.input_size != INPUT_SIZE:
        raise ValueError(f"Only {INPUT_SIZE}x{INPUT_SIZE} exports are supported (got {decoder_cfg.input_size}).")

    resolved = resolve_path(model_path, root=root)
    if resolved.suffix.lower() != ".onnx":
        raise ValueError(f"Expected an .onnx model, got '{resolved.suffix}'.")

    from .backends.onnxruntime_backend import OnnxRuntimeBackend, OnnxRuntimeBackendConfig

    ort_backend = OnnxRuntimeBackend(
        resolved,
        OnnxRuntimeBackendConfig(
            providers=onnx_providers,
            input_name=onnx_input_name,
            output_name=onnx_output_name,
        ),
    )
    return DetectionPipeline(
        ort_backend.infer,
        backend=ort_backend,
        decoder_cfg=decoder_cfg,
        nms_cfg=nms_cfg,
    )
