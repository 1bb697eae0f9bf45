"""Error taxonomy for environment setup, model loading, shape contracts and runs."""


class InferenceError(Exception):
    """Base class for every error raised by the inference pipeline."""


class InitializationError(InferenceError):
    """The process-wide environment could not be created."""


class ModelLoadError(InferenceError):
    """A model file is missing, unreadable or not a valid graph."""


class UnresolvedShapeError(InferenceError):
    """A dynamic dimension was found where a concrete size is required."""


class ShapeMismatchError(InferenceError):
    """
    An actual shape does not satisfy a declared shape.

    Attributes
    ----------
    axis : int | None
        Offending axis, or None when the mismatch is not tied to one axis.
    expected : object
        Expected value (dimension, rank or count).
    actual : object
        Actual value (dimension, rank or count).
    index : int | None
        Position of the offending tensor in its input/output list, if known.
    """

    def __init__(
        self,
        message: str,
        axis: int | None = None,
        expected: object = None,
        actual: object = None,
        index: int | None = None,
    ) -> None:
        super().__init__(message)
        self.axis = axis
        self.expected = expected
        self.actual = actual
        self.index = index


class RankMismatchError(ShapeMismatchError):
    """Actual and expected shapes have a different number of axes."""


class InferenceExecutionError(InferenceError):
    """The engine failed while executing a forward pass."""


class SessionClosedError(InferenceError):
    """An operation was attempted on a closed session."""
