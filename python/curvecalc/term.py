# CurveCalc - Terms
# Copyright (c) 2024 CurveCalc Contributors. All rights reserved.

"""
Leaf terms and the real/complex numeric tower.

A term is a real number, a complex number or a variable placeholder. Numeric
terms are constants; variables never are. Arithmetic on two reals stays real,
and any complex operand promotes the whole operation to complex.

All numeric work goes through numpy scalars so that domain errors follow IEEE
semantics (``ln(0) == -inf``, ``(-8) ** (1/3)`` is ``nan``) instead of raising
like the ``math`` module does.

Example:
    >>> add(RealNumber(2.0), ComplexNumber(0.0, 1.0))
    ComplexNumber(re=2.0, im=1.0)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import FrozenSet, Union

import numpy as np

from .exceptions import NotConstantError
from .expr import Expr, UnaryKind


# Numeric terms only; variables are excluded
Number = Union['RealNumber', 'ComplexNumber']


class Term(Expr):
    """Base class for leaf terms."""

    def is_const(self) -> bool:
        return False

    def force_const(self) -> Number:
        """Return self as a numeric term, or raise if it is a variable."""
        raise NotConstantError(f"{self!r} is not a constant")

    def is_zero(self) -> bool:
        return False

    def is_one(self) -> bool:
        return False

    def is_neg_one(self) -> bool:
        return False

    def called_functions(self) -> FrozenSet[str]:
        return frozenset()


def _fmt_real(v: float) -> str:
    if np.isfinite(v) and float(v).is_integer():
        return str(int(v))
    return repr(v)


@dataclass(frozen=True, eq=False)
class RealNumber(Term):
    """A real constant."""
    value: float

    def __post_init__(self):
        object.__setattr__(self, 'value', float(self.value))

    def is_const(self) -> bool:
        return True

    def force_const(self) -> RealNumber:
        return self

    def order_num(self) -> int:
        return 0

    def free_vars(self) -> FrozenSet[str]:
        return frozenset()

    def is_zero(self) -> bool:
        return self.value == 0.0

    def is_one(self) -> bool:
        return self.value == 1.0

    def is_neg_one(self) -> bool:
        return self.value == -1.0

    def to_complex(self) -> complex:
        return complex(self.value, 0.0)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RealNumber):
            return self.value == other.value
        if isinstance(other, ComplexNumber):
            return self.to_complex() == other.value
        return NotImplemented

    def __hash__(self) -> int:
        # hash(2.0) == hash(2+0j), matching the promoted equality
        return hash(self.value)

    def __str__(self) -> str:
        return _fmt_real(self.value)


@dataclass(frozen=True, eq=False)
class ComplexNumber(Term):
    """A complex constant ``re + im*i``."""
    re: float
    im: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 're', float(self.re))
        object.__setattr__(self, 'im', float(self.im))

    @classmethod
    def from_complex(cls, z: complex) -> ComplexNumber:
        return cls(z.real, z.imag)

    @property
    def value(self) -> complex:
        return complex(self.re, self.im)

    def is_const(self) -> bool:
        return True

    def force_const(self) -> ComplexNumber:
        return self

    def order_num(self) -> int:
        return 0

    def free_vars(self) -> FrozenSet[str]:
        return frozenset()

    def is_zero(self) -> bool:
        return self.value == 0

    def is_one(self) -> bool:
        return self.value == 1

    def is_neg_one(self) -> bool:
        return self.value == -1

    def to_complex(self) -> complex:
        return self.value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (RealNumber, ComplexNumber)):
            return self.value == other.to_complex()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __str__(self) -> str:
        sign = '-' if self.im < 0 or (self.im == 0 and np.signbit(self.im)) else '+'
        return f"({_fmt_real(self.re)}{sign}{_fmt_real(abs(self.im))}i)"


@dataclass(frozen=True)
class Variable(Term):
    """A named placeholder, resolved through a Context."""
    name: str

    def order_num(self) -> int:
        return 1

    def sort_key(self) -> tuple[int, str]:
        return (1, self.name)

    def free_vars(self) -> FrozenSet[str]:
        return frozenset({self.name})

    def __str__(self) -> str:
        return self.name


# Numeric tower

def _wrap(value) -> Number:
    """Turn a numpy scalar back into a term, keeping its real/complex kind."""
    if np.iscomplexobj(value):
        return ComplexNumber.from_complex(complex(value))
    return RealNumber(float(value))


def _both_real(a: Number, b: Number) -> bool:
    return isinstance(a, RealNumber) and isinstance(b, RealNumber)


def add(a: Term, b: Term) -> Number:
    """a + b with real-to-complex promotion."""
    a, b = a.force_const(), b.force_const()
    if _both_real(a, b):
        return RealNumber(a.value + b.value)
    return ComplexNumber.from_complex(a.to_complex() + b.to_complex())


def mul(a: Term, b: Term) -> Number:
    """a * b with real-to-complex promotion."""
    a, b = a.force_const(), b.force_const()
    if _both_real(a, b):
        return RealNumber(a.value * b.value)
    return ComplexNumber.from_complex(a.to_complex() * b.to_complex())


def power(a: Term, b: Term) -> Number:
    """
    a ** b.

    Two reals use real exponentiation, so a negative base with a fractional
    exponent yields ``nan``. If either side is complex the principal branch
    ``exp(b * ln(a))`` is used.
    """
    a, b = a.force_const(), b.force_const()
    with np.errstate(all='ignore'):
        if _both_real(a, b):
            return RealNumber(float(np.power(np.float64(a.value), np.float64(b.value))))
        za = np.complex128(a.to_complex())
        zb = np.complex128(b.to_complex())
        return _wrap(np.exp(zb * np.log(za)))


_UFUNCS = {
    UnaryKind.NEG: np.negative,
    UnaryKind.INV: np.reciprocal,
    UnaryKind.ABS: np.abs,
    UnaryKind.LN: np.log,
    UnaryKind.SIN: np.sin,
    UnaryKind.COS: np.cos,
    UnaryKind.TAN: np.tan,
    UnaryKind.SINH: np.sinh,
    UnaryKind.COSH: np.cosh,
    UnaryKind.TANH: np.tanh,
    UnaryKind.ASIN: np.arcsin,
    UnaryKind.ACOS: np.arccos,
    UnaryKind.ATAN: np.arctan,
    UnaryKind.ASINH: np.arcsinh,
    UnaryKind.ACOSH: np.arccosh,
    UnaryKind.ATANH: np.arctanh,
}


def apply_unary(kind: UnaryKind, t: Term) -> Number:
    """
    Apply a single-operand function to a numeric term.

    The real variant is used for RealNumber and the complex variant for
    ComplexNumber; e.g. ``ln(-1)`` is ``nan`` for a real operand but
    ``pi*i`` for a complex one. ``abs`` of a complex number is real.
    """
    t = t.force_const()
    ufunc = _UFUNCS[kind]
    with np.errstate(all='ignore'):
        if isinstance(t, RealNumber):
            return _wrap(ufunc(np.float64(t.value)))
        return _wrap(ufunc(np.complex128(t.value)))
