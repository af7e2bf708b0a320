from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .types import Detection


@dataclass(frozen=True)
class NMSConfig:
    iou_threshold: float = 0.7
    max_detections: Optional[int] = None


def box_iou(a: Tuple[float, float, float, float], b: Tuple[float, float, float, float]) -> float:
    """
    IoU of two xyxy boxes. A zero union (two zero-area boxes) counts as 0.
    """

    ax1, ay1, ax2, ay2 = a
    bx1, by1, bx2, by2 = b
    inter = max(0.0, min(ax2, bx2) - max(ax1, bx1)) * max(0.0, min(ay2, by2) - max(ay1, by1))
    union = (ax2 - ax1) * (ay2 - ay1) + (bx2 - bx1) * (by2 - by1) - inter
    if union <= 0:
        return 0.0
    return float(inter / union)


def _iou_one_to_many(box: np.ndarray, others: np.ndarray) -> np.ndarray:
    xx1 = np.maximum(box[0], others[:, 0])
    yy1 = np.maximum(box[1], others[:, 1])
    xx2 = np.minimum(box[2], others[:, 2])
    yy2 = np.minimum(box[3], others[:, 3])

    inter = np.maximum(0.0, xx2 - xx1) * np.maximum(0.0, yy2 - yy1)
    area = (box[2] - box[0]) * (box[3] - box[1])
    areas = (others[:, 2] - others[:, 0]) * (others[:, 3] - others[:, 1])
    union = area + areas - inter
    safe = np.where(union > 0, union, 1.0)
    return np.where(union > 0, inter / safe, 0.0)


def nms(boxes: np.ndarray, scores: np.ndarray, cfg: NMSConfig) -> np.ndarray:
    """
    Greedy NumPy NMS. Expects boxes shape (N,4) in xyxy and scores shape (N,).
    Returns indices of boxes to keep, in selection order.

    Equal scores keep their input order. A candidate survives a selection only
    while its IoU with the selected box stays strictly below the threshold.
    """

    if boxes.size == 0:
        return np.empty((0,), dtype=np.int64)

    boxes = np.asarray(boxes, dtype=np.float64)
    order = np.argsort(-np.asarray(scores, dtype=np.float64), kind="stable")
    keep: List[int] = []

    while order.size > 0:
        if cfg.max_detections is not None and len(keep) >= cfg.max_detections:
            break
        i = order[0]
        keep.append(int(i))

        rest = order[1:]
        iou = _iou_one_to_many(boxes[i], boxes[rest])
        order = rest[iou < cfg.iou_threshold]

    return np.array(keep, dtype=np.int64)


class Suppressor:
    """
    Class-agnostic NMS over Detection objects: boxes of different labels suppress each other.
    """

    def __init__(self, cfg: NMSConfig = NMSConfig()):
        self.cfg = cfg

    def suppress(self, detections: Sequence[Detection]) -> List[Detection]:
        if not detections:
            return []
        boxes = np.array([d.as_xyxy() for d in detections], dtype=np.float64)
        scores = np.array([d.score for d in detections], dtype=np.float64)
        return [detections[i] for i in nms(boxes, scores, self.cfg)]
