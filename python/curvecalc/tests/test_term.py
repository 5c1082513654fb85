# Tests for term.py - Terms and the numeric tower

import math

import pytest

from curvecalc.expr import UnaryKind
from curvecalc.term import (
    RealNumber, ComplexNumber, Variable,
    add, mul, power, apply_unary,
)
from curvecalc.exceptions import NotConstantError


class TestTermEquality:
    """Numeric terms compare by value with real-to-complex promotion."""

    def test_real_equals_real(self):
        assert RealNumber(2.0) == RealNumber(2)

    def test_real_equals_promoted_complex(self):
        assert RealNumber(2.0) == ComplexNumber(2.0, 0.0)
        assert ComplexNumber(2.0, 0.0) == RealNumber(2.0)

    def test_real_differs_from_complex_with_imaginary_part(self):
        assert RealNumber(2.0) != ComplexNumber(2.0, 1.0)

    def test_hash_consistent_with_promotion(self):
        assert hash(RealNumber(2.0)) == hash(ComplexNumber(2.0, 0.0))
        assert len({RealNumber(3.0), ComplexNumber(3.0, 0.0)}) == 1

    def test_variables_compare_by_name(self):
        assert Variable('x') == Variable('x')
        assert Variable('x') != Variable('y')

    def test_number_never_equals_variable(self):
        assert RealNumber(1.0) != Variable('x')
        assert Variable('x') != ComplexNumber(0.0, 1.0)

    def test_nan_is_not_equal_to_itself(self):
        assert RealNumber(float('nan')) != RealNumber(float('nan'))


class TestConstness:
    """Numbers are constant, variables never are."""

    def test_is_const(self):
        assert RealNumber(1.0).is_const()
        assert ComplexNumber(0.0, 1.0).is_const()
        assert not Variable('x').is_const()

    def test_force_const_on_variable_raises(self):
        with pytest.raises(NotConstantError):
            Variable('x').force_const()

    def test_arithmetic_on_variable_raises(self):
        with pytest.raises(NotConstantError):
            add(Variable('x'), RealNumber(1.0))

    def test_order_num(self):
        assert RealNumber(1.0).order_num() == 0
        assert ComplexNumber(1.0, 1.0).order_num() == 0
        assert Variable('x').order_num() == 1

    def test_predicates(self):
        assert RealNumber(0.0).is_zero()
        assert RealNumber(1.0).is_one()
        assert RealNumber(-1.0).is_neg_one()
        assert ComplexNumber(1.0, 0.0).is_one()
        assert ComplexNumber(-1.0, 0.0).is_neg_one()
        assert not ComplexNumber(0.0, 0.0).is_one()
        assert not Variable('x').is_zero()


class TestPromotion:
    """Arithmetic promotes to complex when either operand is complex."""

    def test_real_plus_real_stays_real(self):
        result = add(RealNumber(2.0), RealNumber(3.0))
        assert isinstance(result, RealNumber)
        assert result == RealNumber(5.0)

    def test_real_plus_complex(self):
        result = add(RealNumber(2.0), ComplexNumber(0.0, 1.0))
        assert isinstance(result, ComplexNumber)
        assert result == ComplexNumber(2.0, 1.0)

    def test_real_times_complex(self):
        result = mul(RealNumber(2.0), ComplexNumber(0.0, 1.0))
        assert isinstance(result, ComplexNumber)
        assert result == ComplexNumber(0.0, 2.0)

    def test_i_squared(self):
        i = ComplexNumber(0.0, 1.0)
        assert mul(i, i) == RealNumber(-1.0)

    def test_real_power(self):
        result = power(RealNumber(2.0), RealNumber(10.0))
        assert isinstance(result, RealNumber)
        assert result == RealNumber(1024.0)

    def test_power_promotes(self):
        result = power(RealNumber(2.0), ComplexNumber(1.0, 0.0))
        assert isinstance(result, ComplexNumber)
        assert abs(result.value - 2.0) < 1e-12

    def test_complex_power_principal_branch(self):
        # i ** i = exp(-pi/2)
        i = ComplexNumber(0.0, 1.0)
        result = power(i, i)
        assert abs(result.value - math.exp(-math.pi / 2)) < 1e-12


class TestDomainErrors:
    """Domain errors give IEEE nan/inf instead of raising."""

    def test_negative_base_fractional_exponent_is_nan(self):
        result = power(RealNumber(-8.0), RealNumber(1.0 / 3.0))
        assert math.isnan(result.value)

    def test_zero_to_negative_power_is_inf(self):
        result = power(RealNumber(0.0), RealNumber(-1.0))
        assert result.value == math.inf

    def test_ln_zero(self):
        assert apply_unary(UnaryKind.LN, RealNumber(0.0)).value == -math.inf

    def test_real_ln_of_negative_is_nan(self):
        assert math.isnan(apply_unary(UnaryKind.LN, RealNumber(-1.0)).value)

    def test_complex_ln_of_negative(self):
        result = apply_unary(UnaryKind.LN, ComplexNumber(-1.0, 0.0))
        assert isinstance(result, ComplexNumber)
        assert abs(result.re) < 1e-12
        assert abs(result.im - math.pi) < 1e-12

    def test_inverse_of_zero(self):
        assert apply_unary(UnaryKind.INV, RealNumber(0.0)).value == math.inf

    def test_real_asin_out_of_range(self):
        assert math.isnan(apply_unary(UnaryKind.ASIN, RealNumber(2.0)).value)


class TestUnary:
    """Real and complex variants of single-operand functions."""

    @pytest.mark.parametrize("kind,arg,expected", [
        (UnaryKind.NEG, 2.0, -2.0),
        (UnaryKind.ABS, -3.0, 3.0),
        (UnaryKind.SIN, 0.0, 0.0),
        (UnaryKind.COS, 0.0, 1.0),
        (UnaryKind.TANH, 0.0, 0.0),
        (UnaryKind.ACOSH, 1.0, 0.0),
    ])
    def test_real(self, kind, arg, expected):
        result = apply_unary(kind, RealNumber(arg))
        assert isinstance(result, RealNumber)
        assert result.value == pytest.approx(expected)

    def test_abs_of_complex_is_real(self):
        result = apply_unary(UnaryKind.ABS, ComplexNumber(3.0, 4.0))
        assert isinstance(result, RealNumber)
        assert result == RealNumber(5.0)

    def test_complex_variant_used_for_complex(self):
        result = apply_unary(UnaryKind.SIN, ComplexNumber(0.0, 1.0))
        assert isinstance(result, ComplexNumber)
        assert result.im == pytest.approx(math.sinh(1.0))


class TestFormatting:

    def test_str(self):
        assert str(RealNumber(2.0)) == '2'
        assert str(RealNumber(0.5)) == '0.5'
        assert str(ComplexNumber(1.0, -2.0)) == '(1-2i)'
        assert str(Variable('x')) == 'x'
