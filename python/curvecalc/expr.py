# CurveCalc - Expression Trees
# Copyright (c) 2024 CurveCalc Contributors. All rights reserved.

"""
Expression trees for CurveCalc.

An expression is an immutable tree of nodes. Leaves are terms (real numbers,
complex numbers and variables, see ``curvecalc.term``); composite nodes own
their children. There are no subtraction or division nodes: the builders
desugar ``a - b`` into ``a + (-1 * b)`` and ``a / b`` into ``a * b**-1``.

Example:
    >>> x = var('x')
    >>> expr = 2 * x**2 - sin(x)
    >>> expr.free_vars()
    frozenset({'x'})
    >>> str(expr)
    '((2 * x ^ 2) + (-1 * sin(x)))'
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Union, FrozenSet


# Type alias for things that can be converted to expressions
ExprLike = Union['Expr', int, float, complex]


class UnaryKind(Enum):
    """The closed set of single-operand functions."""
    NEG = 'neg'
    INV = 'inv'
    ABS = 'abs'
    LN = 'ln'
    SIN = 'sin'
    COS = 'cos'
    TAN = 'tan'
    SINH = 'sinh'
    COSH = 'cosh'
    TANH = 'tanh'
    ASIN = 'asin'
    ACOS = 'acos'
    ATAN = 'atan'
    ASINH = 'asinh'
    ACOSH = 'acosh'
    ATANH = 'atanh'


class Expr(ABC):
    """
    Base class for expression nodes.

    Nodes are immutable and can be composed using Python operators.
    """

    @abstractmethod
    def free_vars(self) -> FrozenSet[str]:
        """Return all variable names referenced in this expression."""
        ...

    @abstractmethod
    def called_functions(self) -> FrozenSet[str]:
        """Return the names of all functions called in this expression."""
        ...

    def order_num(self) -> int:
        """
        Ordering class used when sorting commutative operands.

        0 for numeric terms, 1 for variables, 2 for composite nodes.
        """
        return 2

    def sort_key(self) -> tuple[int, str]:
        return (self.order_num(), '')

    # Operator overloading for natural math syntax
    def __neg__(self) -> Expr:
        return neg(self)

    def __add__(self, other: ExprLike) -> Expr:
        return Add((self, _to_expr(other)))

    def __radd__(self, other: ExprLike) -> Expr:
        return Add((_to_expr(other), self))

    def __sub__(self, other: ExprLike) -> Expr:
        return Add((self, neg(_to_expr(other))))

    def __rsub__(self, other: ExprLike) -> Expr:
        return Add((_to_expr(other), neg(self)))

    def __mul__(self, other: ExprLike) -> Expr:
        return Mul((self, _to_expr(other)))

    def __rmul__(self, other: ExprLike) -> Expr:
        return Mul((_to_expr(other), self))

    def __truediv__(self, other: ExprLike) -> Expr:
        return Mul((self, inv(_to_expr(other))))

    def __rtruediv__(self, other: ExprLike) -> Expr:
        return Mul((_to_expr(other), inv(self)))

    def __pow__(self, other: ExprLike) -> Expr:
        return Pow(self, _to_expr(other))

    def __rpow__(self, other: ExprLike) -> Expr:
        return Pow(_to_expr(other), self)


# Imported after Expr is defined: the term classes subclass it.
from .term import Term, RealNumber, ComplexNumber, Variable  # noqa: E402


def _to_expr(x: ExprLike) -> Expr:
    """Convert a value to an Expr."""
    if isinstance(x, Expr):
        return x
    elif isinstance(x, bool):
        raise TypeError("Cannot convert bool to Expr")
    elif isinstance(x, (int, float)):
        return RealNumber(float(x))
    elif isinstance(x, complex):
        return ComplexNumber(x.real, x.imag)
    else:
        raise TypeError(f"Cannot convert {type(x).__name__} to Expr")


def _union_vars(nodes) -> FrozenSet[str]:
    result: FrozenSet[str] = frozenset()
    for node in nodes:
        result = result | node.free_vars()
    return result


def _union_calls(nodes) -> FrozenSet[str]:
    result: FrozenSet[str] = frozenset()
    for node in nodes:
        result = result | node.called_functions()
    return result


# N-ary commutative operations

@dataclass(frozen=True)
class Add(Expr):
    """Sum of two or more operands."""
    children: tuple[Expr, ...]

    def __post_init__(self):
        children = tuple(self.children)
        if len(children) < 2:
            raise ValueError(f"Add needs at least 2 operands, got {len(children)}")
        object.__setattr__(self, 'children', children)

    def free_vars(self) -> FrozenSet[str]:
        return _union_vars(self.children)

    def called_functions(self) -> FrozenSet[str]:
        return _union_calls(self.children)

    def __str__(self) -> str:
        return '(' + ' + '.join(str(c) for c in self.children) + ')'


@dataclass(frozen=True)
class Mul(Expr):
    """Product of two or more operands."""
    children: tuple[Expr, ...]

    def __post_init__(self):
        children = tuple(self.children)
        if len(children) < 2:
            raise ValueError(f"Mul needs at least 2 operands, got {len(children)}")
        object.__setattr__(self, 'children', children)

    def free_vars(self) -> FrozenSet[str]:
        return _union_vars(self.children)

    def called_functions(self) -> FrozenSet[str]:
        return _union_calls(self.children)

    def __str__(self) -> str:
        return '(' + ' * '.join(str(c) for c in self.children) + ')'


@dataclass(frozen=True)
class Pow(Expr):
    """Power: base ** exponent."""
    base: Expr
    exponent: Expr

    def free_vars(self) -> FrozenSet[str]:
        return self.base.free_vars() | self.exponent.free_vars()

    def called_functions(self) -> FrozenSet[str]:
        return self.base.called_functions() | self.exponent.called_functions()

    def __str__(self) -> str:
        return f"{self.base} ^ {self.exponent}"


@dataclass(frozen=True)
class Unary(Expr):
    """A single-operand function such as sin, ln or abs."""
    kind: UnaryKind
    operand: Expr

    def free_vars(self) -> FrozenSet[str]:
        return self.operand.free_vars()

    def called_functions(self) -> FrozenSet[str]:
        return self.operand.called_functions()

    def __str__(self) -> str:
        return f"{self.kind.value}({self.operand})"


@dataclass(frozen=True)
class FunctionCall(Expr):
    """Call of a user-defined function by name."""
    name: str
    args: tuple[Expr, ...]

    def __post_init__(self):
        object.__setattr__(self, 'args', tuple(self.args))

    def free_vars(self) -> FrozenSet[str]:
        return _union_vars(self.args)

    def called_functions(self) -> FrozenSet[str]:
        return frozenset({self.name}) | _union_calls(self.args)

    def __str__(self) -> str:
        return f"{self.name}(" + ', '.join(str(a) for a in self.args) + ')'


# Public constructors

def var(name: str) -> Variable:
    """Create a variable reference with the given name."""
    if not isinstance(name, str):
        raise TypeError(f"Variable name must be a string, got {type(name).__name__}")
    if not name:
        raise ValueError("Variable name cannot be empty")
    return Variable(name)


def num(value: Union[int, float, complex]) -> Term:
    """Create a numeric term. Complex values give a ComplexNumber."""
    return _to_expr(value)


# Alias kept for symmetry with var()
const = num


def add(*operands: ExprLike) -> Add:
    """Sum of all operands."""
    return Add(tuple(_to_expr(o) for o in operands))


def mul(*operands: ExprLike) -> Mul:
    """Product of all operands."""
    return Mul(tuple(_to_expr(o) for o in operands))


def sub(a: ExprLike, b: ExprLike) -> Add:
    """a - b, desugared to a + (-1 * b)."""
    return Add((_to_expr(a), neg(b)))


def div(a: ExprLike, b: ExprLike) -> Mul:
    """a / b, desugared to a * b**-1."""
    return Mul((_to_expr(a), inv(b)))


def pow_(base: ExprLike, exponent: ExprLike) -> Pow:
    """base ** exponent."""
    return Pow(_to_expr(base), _to_expr(exponent))


def neg(e: ExprLike) -> Mul:
    """Negation, desugared to -1 * e."""
    return Mul((RealNumber(-1.0), _to_expr(e)))


def inv(e: ExprLike) -> Pow:
    """Multiplicative inverse, desugared to e ** -1."""
    return Pow(_to_expr(e), RealNumber(-1.0))


def call(name: str, *args: ExprLike) -> FunctionCall:
    """Call the user-defined function ``name``."""
    return FunctionCall(name, tuple(_to_expr(a) for a in args))


def unary(kind: UnaryKind, e: ExprLike) -> Unary:
    """Apply a single-operand function of the given kind."""
    return Unary(kind, _to_expr(e))


def abs_(e: ExprLike) -> Unary:
    """Absolute value (complex magnitude for complex operands)."""
    return Unary(UnaryKind.ABS, _to_expr(e))


def ln(e: ExprLike) -> Unary:
    """Natural logarithm."""
    return Unary(UnaryKind.LN, _to_expr(e))


def sqrt(e: ExprLike) -> Pow:
    """Square root, as e ** 0.5."""
    return Pow(_to_expr(e), RealNumber(0.5))


def sin(e: ExprLike) -> Unary:
    return Unary(UnaryKind.SIN, _to_expr(e))


def cos(e: ExprLike) -> Unary:
    return Unary(UnaryKind.COS, _to_expr(e))


def tan(e: ExprLike) -> Unary:
    return Unary(UnaryKind.TAN, _to_expr(e))


def sinh(e: ExprLike) -> Unary:
    return Unary(UnaryKind.SINH, _to_expr(e))


def cosh(e: ExprLike) -> Unary:
    return Unary(UnaryKind.COSH, _to_expr(e))


def tanh(e: ExprLike) -> Unary:
    return Unary(UnaryKind.TANH, _to_expr(e))


def asin(e: ExprLike) -> Unary:
    return Unary(UnaryKind.ASIN, _to_expr(e))


def acos(e: ExprLike) -> Unary:
    return Unary(UnaryKind.ACOS, _to_expr(e))


def atan(e: ExprLike) -> Unary:
    return Unary(UnaryKind.ATAN, _to_expr(e))


def asinh(e: ExprLike) -> Unary:
    return Unary(UnaryKind.ASINH, _to_expr(e))


def acosh(e: ExprLike) -> Unary:
    return Unary(UnaryKind.ACOSH, _to_expr(e))


def atanh(e: ExprLike) -> Unary:
    return Unary(UnaryKind.ATANH, _to_expr(e))
