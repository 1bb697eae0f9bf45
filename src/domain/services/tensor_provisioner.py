"""
Tensor Provisioner.

Builds concrete input tensors from declared shapes.
"""
import logging
from typing import Callable

import numpy as np

from src.domain.entities.errors import UnresolvedShapeError
from src.domain.entities.tensor import (
    Tensor,
    TensorShape,
    element_count,
    format_shape,
    is_concrete,
)
from src.domain.services.shape_validator import assert_shape

logger = logging.getLogger(__name__)

Generator = Callable[[int], float]


def fill(shape: TensorShape, generator: Generator | None = None) -> Tensor:
    """
    Allocate a float32 tensor of `shape` and fill it.

    Parameters
    ----------
    shape : TensorShape
        Fully concrete shape.
    generator : Callable[[int], float] | None, optional
        Function of the flat row-major index. When None, values are evenly
        spaced over [0.0, 1.0].

    Returns
    -------
    Tensor
        Tensor holding exactly prod(shape) elements.

    Raises
    ------
    UnresolvedShapeError
        If any dimension of `shape` is dynamic.
    """
    count = element_count(shape)
    if generator is None:
        values = np.linspace(0.0, 1.0, count, dtype=np.float32)
    else:
        values = np.fromiter(
            (generator(i) for i in range(count)), dtype=np.float32, count=count
        )
    logger.debug(f"Provisioned tensor {format_shape(shape)} with {count} elements")
    return Tensor(values.reshape(shape))


def resolve_shape(
    declared: TensorShape,
    override: TensorShape | None = None,
    name: str | None = None,
) -> TensorShape:
    """
    Bind a concrete shape to a declared input shape.

    Parameters
    ----------
    declared : TensorShape
        Shape declared by the model.
    override : TensorShape | None, optional
        Caller-supplied concrete shape. It must satisfy `declared`.
    name : str | None, optional
        Input name, used in error messages.

    Returns
    -------
    TensorShape
        `override` when given, otherwise `declared` unchanged.

    Raises
    ------
    UnresolvedShapeError
        If `override` itself has a dynamic axis.
    ShapeMismatchError
        If `override` conflicts with `declared`.
    """
    if override is None:
        return tuple(declared)
    override = tuple(override)
    label = f"input '{name}'" if name else "input"
    if not is_concrete(override):
        raise UnresolvedShapeError(
            f"{label}: override {format_shape(override)} must be fully concrete"
        )
    assert_shape(override, declared, label=label)
    return override
