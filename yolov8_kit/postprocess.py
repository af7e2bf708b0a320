from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .classes import COCO_CLASSES
from .errors import InferenceFailure
from .types import Detection


@dataclass(frozen=True)
class DecoderConfig:
    """
    Settings for decoding a YOLOv8 (4 + C, A) output, e.g. 84 x 8400 for COCO.
    """

    conf_threshold: float = 0.5
    input_size: int = 640
    num_anchors: int = 8400
    class_names: Sequence[str] = COCO_CLASSES

    @property
    def num_classes(self) -> int:
        return len(self.class_names)


class DetectionDecoder:
    """
    Turn the raw output of one image into candidate detections in original-image pixels.

    Supported layouts (per image):
    - (4 + C, A): rows cx, cy, w, h then C class-score rows, one column per anchor
    - (1, 4 + C, A): same with a batch axis of 1
    - flat buffer of (4 + C) * A values in the row-major order above

    No suppression happens here; see `Suppressor`.
    """

    def __init__(self, cfg: DecoderConfig = DecoderConfig()):
        self.cfg = cfg

    def decode(self, preds: np.ndarray, orig_size: Tuple[int, int]) -> List[Detection]:
        """
        Args:
            preds: model output for a single image
            orig_size: (width, height) of the image before the fill resize
        """

        p = self._as_rows(preds)
        class_scores = p[4:, :]

        # argmax picks the lowest class index on ties
        class_ids = np.argmax(class_scores, axis=0)
        scores = class_scores[class_ids, np.arange(class_scores.shape[1])]

        keep = scores >= self.cfg.conf_threshold
        if not np.any(keep):
            return []

        boxes = p[0:4, keep].astype(np.float64)
        class_ids = class_ids[keep]
        scores = scores[keep]

        boxes_xyxy = self._scale_boxes(self._cxcywh_to_xyxy(boxes), orig_size)

        names = self.cfg.class_names
        return [
            Detection(
                x1=float(x1),
                y1=float(y1),
                x2=float(x2),
                y2=float(y2),
                label=names[int(cls_id)],
                score=float(score),
                class_id=int(cls_id),
            )
            for (x1, y1, x2, y2), score, cls_id in zip(boxes_xyxy, scores, class_ids)
        ]

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _as_rows(self, preds: np.ndarray) -> np.ndarray:
        if preds is None:
            raise InferenceFailure("Model output is missing.")

        rows = 4 + self.cfg.num_classes
        anchors = self.cfg.num_anchors
        p = np.asarray(preds, dtype=np.float32)

        if p.ndim == 3:
            if p.shape[0] != 1:
                raise InferenceFailure(f"Batch > 1 is not supported (got shape {p.shape}).")
            p = p[0]
        if p.ndim == 1 and p.size == rows * anchors:
            p = p.reshape(rows, anchors)

        if p.shape != (rows, anchors):
            raise InferenceFailure(f"Unexpected model output shape {np.shape(preds)}, expected ({rows}, {anchors}).")
        return p

    @staticmethod
    def _cxcywh_to_xyxy(boxes: np.ndarray) -> np.ndarray:
        cx, cy, w, h = boxes
        return np.stack([cx - w / 2, cy - h / 2, cx + w / 2, cy + h / 2], axis=1)

    def _scale_boxes(self, boxes: np.ndarray, orig_size: Tuple[int, int]) -> np.ndarray:
        """
        Map boxes from model space back to the original image, one ratio per axis.
        """

        orig_w, orig_h = orig_size
        size = float(self.cfg.input_size)
        boxes[:, [0, 2]] *= orig_w / size
        boxes[:, [1, 3]] *= orig_h / size

        # Only the outer edges are clamped.
        boxes[:, 0] = np.maximum(boxes[:, 0], 0.0)
        boxes[:, 1] = np.maximum(boxes[:, 1], 0.0)
        boxes[:, 2] = np.minimum(boxes[:, 2], float(orig_w))
        boxes[:, 3] = np.minimum(boxes[:, 3], float(orig_h))
        return boxes
