class InvalidImage(ValueError):
    """Malformed or zero-size image handed to preprocessing."""


class InferenceFailure(RuntimeError):
    """The inference engine could not produce a well-formed output tensor."""
