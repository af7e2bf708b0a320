from yolov8_kit.errors import InferenceFailure, InvalidImage


class ExtractionFailure(RuntimeError):
    """The video could not be decoded into frames. Fatal for the whole request."""


__all__ = ["ExtractionFailure", "InferenceFailure", "InvalidImage"]
