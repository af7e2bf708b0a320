from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from ..errors import InferenceFailure


PathLike = Union[str, Path]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OnnxRuntimeBackendConfig:
    """
    Configuration for ONNX Runtime inference.

    - providers: ORT execution providers (e.g., ["CUDAExecutionProvider", "CPUExecutionProvider"])
    - input_name/output_name: override auto-selected I/O names if needed
      (YOLOv8 exports use "images" / "output0")
    """

    providers: Optional[Sequence[str]] = None
    input_name: Optional[str] = None
    output_name: Optional[str] = None


class OnnxRuntimeBackend:
    """
    ONNX Runtime session wrapper, loaded once and reused for every frame.

    Expects an NCHW float32 blob shaped (1, 3, 640, 640) and returns the
    primary output, (1, 84, 8400) for a YOLOv8 COCO export.
    """

    def __init__(self, model_path: PathLike, cfg: OnnxRuntimeBackendConfig = OnnxRuntimeBackendConfig()):
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is required for the ONNX backend. Install it with `pip install onnxruntime` "
                "(or `onnxruntime-gpu`)."
            ) from e

        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(f"YOLOv8 model file not found: {self.model_path}")

        providers = list(cfg.providers) if cfg.providers is not None else None
        self.session = ort.InferenceSession(
            str(self.model_path), sess_options=ort.SessionOptions(), providers=providers
        )

        self.input_name = cfg.input_name or self.session.get_inputs()[0].name
        self.output_name = cfg.output_name or self.session.get_outputs()[0].name
        logger.info(
            "Loaded %s (input=%s output=%s providers=%s)",
            self.model_path.name,
            self.input_name,
            self.output_name,
            list(self.providers_in_use),
        )

    @property
    def providers_in_use(self) -> Sequence[str]:
        return tuple(self.session.get_providers())

    def infer(self, blob: np.ndarray) -> np.ndarray:
        outputs = self.session.run([self.output_name], {self.input_name: blob.astype(np.float32, copy=False)})
        if not outputs or outputs[0] is None:
            raise InferenceFailure("Model output is invalid")
        return outputs[0]
