"""
Shape Validator.

Compares actual shapes with declared shapes. A declared dynamic axis
(None) accepts any actual size; every concrete declared axis must match
exactly. The first failing axis aborts the comparison and is reported
with its expected and actual values.
"""
from typing import Sequence

from src.domain.entities.errors import RankMismatchError, ShapeMismatchError
from src.domain.entities.tensor import TensorShape, format_shape


def assert_shape(
    actual: TensorShape,
    expected: TensorShape,
    label: str | None = None,
    index: int | None = None,
) -> None:
    """
    Check that `actual` satisfies `expected`.

    Parameters
    ----------
    actual : TensorShape
        Observed shape.
    expected : TensorShape
        Declared shape; None axes are unconstrained.
    label : str | None, optional
        Prefix for the error message (e.g. "output 2 ('heatmap')").
    index : int | None, optional
        Position of the tensor in its list, stored on the raised error.

    Raises
    ------
    RankMismatchError
        If the ranks differ.
    ShapeMismatchError
        If a concrete expected axis differs from the actual axis.
    """
    actual = tuple(actual)
    expected = tuple(expected)
    prefix = f"{label}: " if label else ""
    shapes = f"(actual {format_shape(actual)}, expected {format_shape(expected)})"

    if len(actual) != len(expected):
        raise RankMismatchError(
            f"{prefix}rank mismatch, expected {len(expected)} axes, "
            f"got {len(actual)} {shapes}",
            expected=len(expected),
            actual=len(actual),
            index=index,
        )

    for axis, (got, want) in enumerate(zip(actual, expected)):
        if want is not None and got != want:
            raise ShapeMismatchError(
                f"{prefix}axis {axis} expected {want}, got "
                f"{'?' if got is None else got} {shapes}",
                axis=axis,
                expected=want,
                actual=got,
                index=index,
            )


def shapes_match(actual: TensorShape, expected: TensorShape) -> bool:
    """Non-raising form of `assert_shape`."""
    try:
        assert_shape(actual, expected)
    except ShapeMismatchError:
        return False
    return True


def assert_shapes(
    actuals: Sequence[TensorShape],
    expecteds: Sequence[TensorShape],
    kind: str = "output",
    names: Sequence[str] | None = None,
) -> None:
    """
    Check a list of shapes pairwise against a list of declared shapes.

    Parameters
    ----------
    actuals : Sequence[TensorShape]
        Observed shapes, in declared order.
    expecteds : Sequence[TensorShape]
        Declared shapes.
    kind : str
        "input" or "output", used in error messages.
    names : Sequence[str] | None, optional
        Tensor names, used in error messages.

    Raises
    ------
    ShapeMismatchError
        If the counts differ or any pair fails `assert_shape`; the error's
        `index` names the offending position.
    """
    if len(actuals) != len(expecteds):
        raise ShapeMismatchError(
            f"expected {len(expecteds)} {kind} tensors, got {len(actuals)}",
            expected=len(expecteds),
            actual=len(actuals),
        )
    for index, (actual, expected) in enumerate(zip(actuals, expecteds)):
        label = f"{kind} {index}"
        if names is not None:
            label += f" ('{names[index]}')"
        assert_shape(actual, expected, label=label, index=index)
