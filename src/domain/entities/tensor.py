"""Tensor entity - framework-independent shapes and buffers."""
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from src.domain.entities.errors import UnresolvedShapeError

# A dimension is a positive size, or None for an axis only known at run time.
Dimension = int | None
TensorShape = tuple[Dimension, ...]


def normalize_shape(dims: Sequence[object]) -> TensorShape:
    """
    Convert raw dimensions into a TensorShape.

    Integers above zero are kept; symbolic names (strings), None and
    non-positive sizes all become dynamic axes.

    Parameters
    ----------
    dims : Sequence[object]
        Raw dimensions, as reported by an engine or read from configuration.

    Returns
    -------
    TensorShape
        Normalized shape.
    """
    shape = []
    for dim in dims:
        if isinstance(dim, bool):
            raise ValueError(f"Invalid dimension: {dim!r}")
        if isinstance(dim, (int, np.integer)) and dim > 0:
            shape.append(int(dim))
        else:
            shape.append(None)
    return tuple(shape)


def is_concrete(shape: TensorShape) -> bool:
    """Return True when no axis of `shape` is dynamic."""
    return all(dim is not None for dim in shape)


def dynamic_axes(shape: TensorShape) -> list[int]:
    """Return the indices of the dynamic axes of `shape`."""
    return [axis for axis, dim in enumerate(shape) if dim is None]


def element_count(shape: TensorShape) -> int:
    """
    Number of elements held by a tensor of the given shape.

    Raises
    ------
    UnresolvedShapeError
        If any axis is dynamic.
    """
    unresolved = dynamic_axes(shape)
    if unresolved:
        raise UnresolvedShapeError(
            f"Shape {format_shape(shape)} has dynamic axes {unresolved}; "
            "a concrete size is required"
        )
    return math.prod(shape)


def format_shape(shape: TensorShape) -> str:
    """Render a shape like [1, 3, ?, 256], with ? for dynamic axes."""
    return "[" + ", ".join("?" if dim is None else str(dim) for dim in shape) + "]"


@dataclass(frozen=True, eq=False)
class Tensor:
    """
    Read-only float32 buffer with its shape.

    The buffer is C-contiguous and flagged non-writeable. A Tensor holds no
    reference to the session that produced it.

    Attributes
    ----------
    data : np.ndarray
        The tensor values, shaped.
    """

    data: np.ndarray

    def __post_init__(self) -> None:
        data = np.asarray(self.data, dtype=np.float32, order="C")
        if data is self.data and data.flags.writeable:
            data = data.copy()
        data.flags.writeable = False
        object.__setattr__(self, "data", data)

    @classmethod
    def from_array(cls, array) -> "Tensor":
        """Wrap any array-like (e.g. an engine output) as a Tensor."""
        return cls(np.asarray(array))

    @property
    def shape(self) -> TensorShape:
        return tuple(int(dim) for dim in self.data.shape)

    @property
    def element_count(self) -> int:
        return int(self.data.size)
