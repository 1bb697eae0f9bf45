"""Tests for the shape validator."""
import itertools

import pytest

from src.domain.entities.errors import RankMismatchError, ShapeMismatchError
from src.domain.services.shape_validator import assert_shape, assert_shapes, shapes_match


class TestAssertShape:
    """Tests for assert_shape."""

    def test_identical_concrete_shapes_pass(self):
        """Identical concrete shapes should be accepted."""
        assert_shape((1, 3, 256, 256), (1, 3, 256, 256))

    def test_dynamic_expected_axis_accepts_any_size(self):
        """A dynamic expected axis should not constrain the actual axis."""
        for batch in (1, 2, 64):
            assert_shape((batch, 4), (None, 4))

    def test_all_dynamic_expected_shape_only_checks_rank(self):
        """An all-dynamic expected shape should only check the rank."""
        assert_shape((7, 9, 11), (None, None, None))

    def test_rank_mismatch_raises_rank_error(self):
        """Different ranks should raise RankMismatchError."""
        with pytest.raises(RankMismatchError) as excinfo:
            assert_shape((1, 195), (1, 195, 1))
        assert excinfo.value.expected == 3
        assert excinfo.value.actual == 2
        assert excinfo.value.axis is None

    def test_rank_error_is_a_shape_error(self):
        """RankMismatchError should be catchable as ShapeMismatchError."""
        with pytest.raises(ShapeMismatchError):
            assert_shape((1,), (1, 1))

    def test_axis_mismatch_reports_axis_and_values(self):
        """The first failing axis should be reported with both values."""
        with pytest.raises(ShapeMismatchError) as excinfo:
            assert_shape((1, 64, 32, 39), (1, 64, 64, 39))
        error = excinfo.value
        assert not isinstance(error, RankMismatchError)
        assert error.axis == 2
        assert error.expected == 64
        assert error.actual == 32
        assert "axis 2" in str(error)
        assert "expected 64" in str(error)
        assert "got 32" in str(error)

    def test_first_failing_axis_aborts(self):
        """Only the first failing axis should be reported."""
        with pytest.raises(ShapeMismatchError) as excinfo:
            assert_shape((2, 5), (1, 4))
        assert excinfo.value.axis == 0

    def test_label_and_index_are_attached(self):
        """Label should prefix the message and index should be stored."""
        with pytest.raises(ShapeMismatchError) as excinfo:
            assert_shape((1, 2), (1, 1), label="output 1 ('Identity_1')", index=1)
        assert str(excinfo.value).startswith("output 1 ('Identity_1'): ")
        assert excinfo.value.index == 1

    def test_dynamic_actual_against_concrete_expected_fails(self):
        """An unknown actual size cannot satisfy a concrete expected size."""
        with pytest.raises(ShapeMismatchError) as excinfo:
            assert_shape((None, 4), (1, 4))
        assert "got ?" in str(excinfo.value)

    def test_scalar_shapes(self):
        """Rank-0 shapes should match each other."""
        assert_shape((), ())


class TestShapesMatch:
    """Tests for the non-raising form."""

    def test_returns_bool(self):
        """shapes_match should mirror assert_shape as a boolean."""
        assert shapes_match((1, 195), (1, 195)) is True
        assert shapes_match((1, 195), (1, 117)) is False
        assert shapes_match((1, 195), (1, 195, 1)) is False
        assert shapes_match((3, 195), (None, 195)) is True

    def test_pass_fail_symmetric_for_concrete_shapes(self):
        """Swapping fully concrete shapes should not change the outcome."""
        shapes = [(1, 195), (1, 117), (1, 1), (1, 64, 64, 39), (195, 1)]
        for a, b in itertools.product(shapes, repeat=2):
            assert shapes_match(a, b) == shapes_match(b, a)

    def test_error_detail_depends_on_argument_order(self):
        """Swapping arguments swaps which value is reported as expected."""
        with pytest.raises(ShapeMismatchError) as forward:
            assert_shape((1, 195), (1, 117))
        with pytest.raises(ShapeMismatchError) as backward:
            assert_shape((1, 117), (1, 195))
        assert forward.value.expected == 117
        assert backward.value.expected == 195


class TestAssertShapes:
    """Tests for assert_shapes over paired lists."""

    def test_matching_lists_pass(self):
        """Pairwise matching lists should be accepted."""
        assert_shapes([(1, 195), (1, 1)], [(1, 195), (None, 1)])

    def test_count_mismatch_raises(self):
        """A different number of shapes should raise ShapeMismatchError."""
        with pytest.raises(ShapeMismatchError) as excinfo:
            assert_shapes([(1, 195)], [(1, 195), (1, 1)], kind="output")
        assert "expected 2 output tensors, got 1" in str(excinfo.value)

    def test_names_offending_index(self):
        """The failing pair's index and name should appear in the error."""
        with pytest.raises(ShapeMismatchError) as excinfo:
            assert_shapes(
                [(1, 195), (1, 1), (1, 256, 256, 2)],
                [(1, 195), (1, 1), (1, 256, 256, 1)],
                kind="output",
                names=["a", "b", "c"],
            )
        error = excinfo.value
        assert error.index == 2
        assert error.axis == 3
        assert "output 2 ('c')" in str(error)
