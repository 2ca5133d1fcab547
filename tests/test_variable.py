"""Tests for single-variable messages."""

import itertools

import numpy as np
import pytest
import torch

from bpfactor import Op, Variable


class TestVariableInit:
    """Test message construction."""

    def test_basic_init(self):
        """Test message stores size and values."""
        message = Variable([0.2, 0.3, 0.5])

        assert message.size == 3
        assert len(message) == 3
        assert message.state(1) == 0.3

    def test_numpy_values(self):
        """Test numpy arrays are accepted as values."""
        message = Variable(np.array([1.0, 2.0]))

        assert message.state(0) == 1.0
        assert message.dtype == torch.float64

    def test_rejects_two_dimensional_values(self):
        """Test a 2-D array is rejected."""
        with pytest.raises(ValueError):
            Variable(np.ones((2, 2)))

    def test_fill(self):
        """Test fill calls the generator once per state."""
        counter = itertools.count()
        message = Variable.fill(3, lambda: next(counter))

        assert torch.allclose(
            message.snapshot_values(), torch.tensor([0.0, 1.0, 2.0], dtype=torch.float64)
        )

    def test_fill_negative_size(self):
        """Test fill rejects a negative size."""
        with pytest.raises(ValueError):
            Variable.fill(-1, lambda: 1.0)

    def test_uniform(self):
        """Test uniform builds an all-ones message."""
        message = Variable.uniform(4)

        assert torch.allclose(message.snapshot_values(), torch.ones(4, dtype=torch.float64))

    def test_caller_buffer_not_aliased(self):
        """Test mutating the input tensor does not change the message."""
        values = torch.tensor([1.0, 2.0], dtype=torch.float64)
        message = Variable(values)
        values[1] = 50.0

        assert message.state(1) == 2.0

    def test_snapshot_is_detached(self):
        """Test mutating a snapshot does not change the message."""
        message = Variable([1.0, 2.0])
        message.snapshot_values()[0] = 9.0

        assert message.state(0) == 1.0


class TestVariableAccess:
    """Test element access and rendering."""

    def test_state_out_of_range(self):
        """Test out-of-range states raise IndexError."""
        message = Variable([1.0, 2.0])

        with pytest.raises(IndexError):
            message.state(2)
        with pytest.raises(IndexError):
            message.state(-1)

    def test_render(self):
        """Test render joins values with the separator."""
        message = Variable([1.0, 0.5, 2.0])

        assert message.render(",") == "1.0,0.5,2.0"
        assert message.render(" ") == "1.0 0.5 2.0"

    def test_repr(self):
        """Test Variable __repr__ method."""
        assert "size=2" in repr(Variable([1.0, 0.5]))


class TestVariableCombine:
    """Test elementwise combination of two messages."""

    def test_product_commutative(self):
        """Test product is commutative."""
        a = Variable([0.2, 0.5, 0.3])
        b = Variable([1.5, 2.0, 4.0])

        assert torch.allclose(a.product(b).snapshot_values(), b.product(a).snapshot_values())

    def test_divide_not_commutative(self):
        """Test divide depends on operand order."""
        a = Variable([1.0, 2.0])
        b = Variable([4.0, 8.0])

        assert not torch.allclose(a.divide(b).snapshot_values(), b.divide(a).snapshot_values())

    def test_divide_then_product(self):
        """Test product by a nonzero message undoes division."""
        a = Variable([0.2, 0.5, 0.3])
        b = Variable([1.5, 2.0, 4.0])
        restored = a.divide(b).product(b)

        assert torch.allclose(restored.snapshot_values(), a.snapshot_values())

    def test_combine_by_op(self):
        """Test combine with an Op member and with an operation name."""
        a = Variable([2.0, 3.0])
        b = Variable([4.0, 5.0])

        assert torch.allclose(
            a.combine(b, Op.PRODUCT).snapshot_values(),
            torch.tensor([8.0, 15.0], dtype=torch.float64),
        )
        assert torch.allclose(
            a.combine(b, "division").snapshot_values(),
            torch.tensor([0.5, 0.6], dtype=torch.float64),
        )

    def test_size_mismatch(self):
        """Test messages of different sizes cannot be combined."""
        with pytest.raises(ValueError):
            Variable([1.0, 2.0]).product(Variable([1.0, 2.0, 3.0]))
        with pytest.raises(ValueError):
            Variable([1.0, 2.0]).divide(Variable([1.0]))

    def test_divide_by_zero_follows_ieee(self):
        """Test division by zero yields inf and nan instead of raising."""
        result = Variable([1.0, 0.0]).divide(Variable([0.0, 0.0])).snapshot_values()

        assert torch.isinf(result[0])
        assert torch.isnan(result[1])


class TestVariableNormalize:
    """Test normalization."""

    def test_normalized(self):
        """Test normalized scales values to sum to one."""
        message = Variable([1.0, 3.0]).normalized()

        assert torch.allclose(
            message.snapshot_values(), torch.tensor([0.25, 0.75], dtype=torch.float64)
        )

    def test_zero_sum_unchanged(self):
        """Test an all-zero message is left unchanged."""
        message = Variable([0.0, 0.0]).normalized()

        assert torch.allclose(message.snapshot_values(), torch.zeros(2, dtype=torch.float64))
