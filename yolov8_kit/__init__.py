"""
YOLOv8 pre/post-processing helpers.

Framework-agnostic: works on NumPy arrays emitted by ONNX Runtime. Covers the
fill resize into a (3, 640, 640) tensor, decoding of the (84, 8400) output,
and class-agnostic greedy NMS.
"""

from .classes import COCO_CLASSES
from .errors import InferenceFailure, InvalidImage
from .nms import NMSConfig, Suppressor, box_iou, nms
from .postprocess import DecoderConfig, DetectionDecoder
from .preprocess import build_input_tensor, fill_resize
from .runtime import DetectionPipeline, find_project_root, load_pipeline, resolve_path
from .types import Detection, Image

__all__ = [
    "COCO_CLASSES",
    "InferenceFailure",
    "InvalidImage",
    "NMSConfig",
    "Suppressor",
    "box_iou",
    "nms",
    "DecoderConfig",
    "DetectionDecoder",
    "build_input_tensor",
    "fill_resize",
    "DetectionPipeline",
    "find_project_root",
    "load_pipeline",
    "resolve_path",
    "Detection",
    "Image",
]
