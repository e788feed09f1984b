class ShapeMismatch(ValueError):
    """Raised when two input fields that must share a shape do not."""


class InvalidConfiguration(ValueError):
    """Raised when detector or extractor parameters make no sense."""


def check_same_shape(*arrays) -> None:
    if not arrays:
        return
    shape = arrays[0].shape
    for other in arrays[1:]:
        if other.shape != shape:
            raise ShapeMismatch(f"Shape mismatch: {shape} vs {other.shape}")
