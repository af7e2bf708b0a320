"""
Inference backends for yolov8_kit.

Backends are kept in a separate module so pre/post-processing stays importable
without an inference runtime installed.
"""

from __future__ import annotations

__all__ = []
