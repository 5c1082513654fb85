# CurveCalc - Symbolic Simplification
# Copyright (c) 2024 CurveCalc Contributors. All rights reserved.

"""
Symbolic simplification for CurveCalc expressions.

The simplifier rewrites an expression against a Context so that sampling
evaluates as little as possible per point:

1. Variable expansion (declared variables are replaced by their bindings)
2. Function inlining (non-recursive calls are replaced by their bodies)
3. Flattening of nested sums and products
4. Ordering of commutative operands (constants, then variables, then the rest)
5. Constant reduction (2 + 3 -> 5, sin(0) -> 0)
6. Identity elimination (x + 0 -> x, x * 1 -> x, x ** 1 -> x, ...)

Steps 3-6 are repeated until nothing changes, so simplifying an already
simplified expression is a no-op.

Example:
    >>> ctx = Context().let('a', num(2) * 3).let('out', var('a') * var('x') + 0)
    >>> expr, funcs = ctx.simplify('out', free=['x'])
    >>> str(expr)
    '(6 * x)'
"""

from __future__ import annotations
from typing import Iterable, Optional, Mapping
import logging

from .expr import Expr, Add, Mul, Pow, Unary, FunctionCall
from .term import Term, RealNumber, Variable, add, mul, power, apply_unary
from .context import Context, Func
from .config import Config
from .exceptions import ValueCycleError, UndefinedFunctionError, ArityError


# Exponents rewritten by expand_powers
SMALL_POWERS = (2.0, 3.0, 4.0, 5.0)


class Simplifier:
    """
    Multi-pass rewrite pipeline bound to one Context.

    Args:
        context: Declarations used for expansion and inlining. Should have
                 passed ``check()``.
        config: Pass limits and optional rewrites.
        logger: Logger for per-pass tracing; defaults to this module's logger.
    """

    def __init__(
        self,
        context: Context,
        config: Optional[Config] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.context = context
        self.config = config or Config()
        self._log = logger or logging.getLogger(__name__)
        self._var_cache: dict[str, Expr] = {}
        self._cache_free: Optional[frozenset[str]] = None

    def simplify(self, expr: Expr, free: Iterable[str] = ()) -> tuple[Expr, dict[str, Func]]:
        """
        Simplify an expression.

        Args:
            expr: Expression to simplify; need not be fully concrete.
            free: Names to leave as variables even if they are declared.

        Returns:
            Tuple of (simplified expression, recursive functions still called
            by it, directly or through each other, with simplified bodies).
            The parameters of returned functions are renamed to fresh names,
            so globals expanded into a body are never captured by them.
        """
        free = frozenset(free)
        result = self._rewrite(expr, free)

        funcs: dict[str, Func] = {}
        pending = list(result.called_functions())
        while pending:
            name = pending.pop()
            if name in funcs:
                continue
            func = self.context.get_func(name)
            params = self._fresh_params(func, free)
            body = substitute(func.body, {p: Variable(q) for p, q in zip(func.params, params)})
            body = self._rewrite(body, free | frozenset(params))
            funcs[name] = Func(func.name, params, body, func.recursive)
            pending.extend(body.called_functions())

        self._log.debug("simplified to %s (recursive functions: %s)", result, sorted(funcs))
        return result, funcs

    def _fresh_params(self, func: Func, free: frozenset[str]) -> tuple[str, ...]:
        """Parameter names of the form 'f.n' that no binding or body can mention."""
        used = set(free)
        for name, value in self.context.vars.items():
            used.add(name)
            used |= value.free_vars()
        for other in self.context.funcs.values():
            used.update(other.params)
            used |= other.body.free_vars()
        params = []
        for param in func.params:
            fresh = f"{func.name}.{param}"
            while fresh in used:
                fresh += "'"
            used.add(fresh)
            params.append(fresh)
        return tuple(params)

    def _rewrite(self, expr: Expr, free: frozenset[str]) -> Expr:
        e = self.expand_vars(expr, free)
        self._log.debug("expanded variables: %s", e)
        e = self.inline_functions(e, free)
        self._log.debug("inlined functions: %s", e)
        return self.canonicalize(e)

    def canonicalize(self, expr: Expr) -> Expr:
        """Run flatten, constant reduction and identity elimination to a fixpoint."""
        e = expr
        for n in range(self.config.max_passes):
            new = flatten(e)
            new = reduce_constants(new)
            new = eliminate_identities(new)
            if self.config.expand_small_powers:
                new = expand_powers(new)
            if new == e:
                break
            self._log.debug("pass %d: %s", n + 1, new)
            e = new
        return e

    # Variable expansion

    def expand_vars(
        self,
        expr: Expr,
        free: frozenset[str] = frozenset(),
        active: tuple[str, ...] = (),
    ) -> Expr:
        """
        Replace declared variables by their bindings, recursively.

        Names in ``free`` and undeclared names are left in place.

        Raises:
            ValueCycleError: If a binding refers back to itself.
        """
        if isinstance(expr, Variable):
            name = expr.name
            if name in free or name not in self.context.vars:
                return expr
            if name in active:
                raise ValueCycleError(name, list(active[active.index(name):]))
            if free != self._cache_free:
                self._var_cache = {}
                self._cache_free = free
            if name not in self._var_cache:
                self._var_cache[name] = self.expand_vars(
                    self.context.vars[name], free, active + (name,))
            return self._var_cache[name]
        elif isinstance(expr, Term):
            return expr
        elif isinstance(expr, Add):
            return Add(tuple(self.expand_vars(c, free, active) for c in expr.children))
        elif isinstance(expr, Mul):
            return Mul(tuple(self.expand_vars(c, free, active) for c in expr.children))
        elif isinstance(expr, Pow):
            return Pow(self.expand_vars(expr.base, free, active),
                       self.expand_vars(expr.exponent, free, active))
        elif isinstance(expr, Unary):
            return Unary(expr.kind, self.expand_vars(expr.operand, free, active))
        elif isinstance(expr, FunctionCall):
            return FunctionCall(expr.name, tuple(self.expand_vars(a, free, active) for a in expr.args))
        raise TypeError(f"Unknown expression node: {type(expr).__name__}")

    # Function inlining

    def inline_functions(self, expr: Expr, free: frozenset[str] = frozenset()) -> Expr:
        """
        Replace calls to non-recursive functions by their bodies.

        Parameters are substituted simultaneously by the (inlined) arguments,
        then any global variables left in the body are expanded. Calls to
        recursive functions are kept, with their arguments inlined.

        Raises:
            UndefinedFunctionError: If a called function is not declared.
            ArityError: If a call has the wrong number of arguments.
        """
        if isinstance(expr, Term):
            return expr
        elif isinstance(expr, Add):
            return Add(tuple(self.inline_functions(c, free) for c in expr.children))
        elif isinstance(expr, Mul):
            return Mul(tuple(self.inline_functions(c, free) for c in expr.children))
        elif isinstance(expr, Pow):
            return Pow(self.inline_functions(expr.base, free),
                       self.inline_functions(expr.exponent, free))
        elif isinstance(expr, Unary):
            return Unary(expr.kind, self.inline_functions(expr.operand, free))
        elif isinstance(expr, FunctionCall):
            func = self.context.funcs.get(expr.name)
            if func is None:
                raise UndefinedFunctionError(expr.name)
            if func.arity != len(expr.args):
                raise ArityError(expr.name, func.arity, len(expr.args))
            args = tuple(self.inline_functions(a, free) for a in expr.args)
            if func.recursive:
                return FunctionCall(expr.name, args)
            body = substitute(func.body, dict(zip(func.params, args)))
            body = self.expand_vars(body, free)
            return self.inline_functions(body, free)
        raise TypeError(f"Unknown expression node: {type(expr).__name__}")


def substitute(expr: Expr, bindings: Mapping[str, Expr]) -> Expr:
    """
    Replace variables by expressions, all at once.

    Substituted expressions are not searched again, so a parameter can
    never capture another parameter's value.
    """
    if isinstance(expr, Variable):
        return bindings.get(expr.name, expr)
    elif isinstance(expr, Term):
        return expr
    elif isinstance(expr, Add):
        return Add(tuple(substitute(c, bindings) for c in expr.children))
    elif isinstance(expr, Mul):
        return Mul(tuple(substitute(c, bindings) for c in expr.children))
    elif isinstance(expr, Pow):
        return Pow(substitute(expr.base, bindings), substitute(expr.exponent, bindings))
    elif isinstance(expr, Unary):
        return Unary(expr.kind, substitute(expr.operand, bindings))
    elif isinstance(expr, FunctionCall):
        return FunctionCall(expr.name, tuple(substitute(a, bindings) for a in expr.args))
    raise TypeError(f"Unknown expression node: {type(expr).__name__}")


def flatten(expr: Expr) -> Expr:
    """Collapse nested Add(Add(...)) and Mul(Mul(...)) into single n-ary nodes."""
    if isinstance(expr, Term):
        return expr
    elif isinstance(expr, (Add, Mul)):
        op = type(expr)
        children: list[Expr] = []
        for child in expr.children:
            child = flatten(child)
            if isinstance(child, op):
                children.extend(child.children)
            else:
                children.append(child)
        return op(tuple(children))
    elif isinstance(expr, Pow):
        return Pow(flatten(expr.base), flatten(expr.exponent))
    elif isinstance(expr, Unary):
        return Unary(expr.kind, flatten(expr.operand))
    elif isinstance(expr, FunctionCall):
        return FunctionCall(expr.name, tuple(flatten(a) for a in expr.args))
    raise TypeError(f"Unknown expression node: {type(expr).__name__}")


def reduce_constants(expr: Expr) -> Expr:
    """
    Fold constant operands into single terms.

    Operands of sums and products are sorted (constants first, then
    variables by name, then composite nodes in their original order) and the
    leading constants are folded left to right.
    """
    if isinstance(expr, Term):
        return expr
    elif isinstance(expr, (Add, Mul)):
        op = type(expr)
        fold = add if op is Add else mul
        children = sorted((reduce_constants(c) for c in expr.children), key=lambda c: c.sort_key())
        cutoff = 0
        while cutoff < len(children) and children[cutoff].order_num() == 0:
            cutoff += 1
        if cutoff == 0:
            return op(tuple(children))
        acc = children[0].force_const()
        for child in children[1:cutoff]:
            acc = fold(acc, child)
        if cutoff == len(children):
            return acc
        return op((acc,) + tuple(children[cutoff:]))
    elif isinstance(expr, Pow):
        base = reduce_constants(expr.base)
        exponent = reduce_constants(expr.exponent)
        if _is_const(base) and _is_const(exponent):
            return power(base, exponent)
        return Pow(base, exponent)
    elif isinstance(expr, Unary):
        operand = reduce_constants(expr.operand)
        if _is_const(operand):
            return apply_unary(expr.kind, operand)
        return Unary(expr.kind, operand)
    elif isinstance(expr, FunctionCall):
        return FunctionCall(expr.name, tuple(reduce_constants(a) for a in expr.args))
    raise TypeError(f"Unknown expression node: {type(expr).__name__}")


def eliminate_identities(expr: Expr) -> Expr:
    """
    Remove identity operands. Assumes constants were reduced already, so an
    identity element of a sum or product can only be its first operand.
    """
    if isinstance(expr, Term):
        return expr
    elif isinstance(expr, (Add, Mul)):
        op = type(expr)
        children = tuple(eliminate_identities(c) for c in expr.children)
        first = children[0]
        if (op is Add and _is_zero(first)) or (op is Mul and _is_one(first)):
            children = children[1:]
            if len(children) == 1:
                return children[0]
        return op(children)
    elif isinstance(expr, Pow):
        base = eliminate_identities(expr.base)
        exponent = eliminate_identities(expr.exponent)
        if _is_zero(base):
            return RealNumber(0.0)      # 0 ^ b
        if _is_zero(exponent):
            return RealNumber(1.0)      # a ^ 0
        if _is_one(base):
            return RealNumber(1.0)      # 1 ^ b
        if _is_one(exponent):
            return base                 # a ^ 1
        return Pow(base, exponent)
    elif isinstance(expr, Unary):
        return Unary(expr.kind, eliminate_identities(expr.operand))
    elif isinstance(expr, FunctionCall):
        return FunctionCall(expr.name, tuple(eliminate_identities(a) for a in expr.args))
    raise TypeError(f"Unknown expression node: {type(expr).__name__}")


def expand_powers(expr: Expr) -> Expr:
    """Rewrite small integer powers (x**2 .. x**5) as repeated multiplication."""
    if isinstance(expr, Term):
        return expr
    elif isinstance(expr, (Add, Mul)):
        return type(expr)(tuple(expand_powers(c) for c in expr.children))
    elif isinstance(expr, Pow):
        base = expand_powers(expr.base)
        exponent = expr.exponent
        if isinstance(exponent, RealNumber) and exponent.value in SMALL_POWERS:
            return Mul((base,) * int(exponent.value))
        return Pow(base, expand_powers(exponent))
    elif isinstance(expr, Unary):
        return Unary(expr.kind, expand_powers(expr.operand))
    elif isinstance(expr, FunctionCall):
        return FunctionCall(expr.name, tuple(expand_powers(a) for a in expr.args))
    raise TypeError(f"Unknown expression node: {type(expr).__name__}")


def factor(expr: Expr) -> Expr:
    """Factor out common terms of sums (undistribution)."""
    raise NotImplementedError("factoring is not implemented")


def simplify_division(expr: Expr) -> Expr:
    """Cancel common factors between a product and its inverses."""
    raise NotImplementedError("division simplification is not implemented")


def simplify(
    expr: Expr,
    context: Optional[Context] = None,
    free: Iterable[str] = (),
    config: Optional[Config] = None,
) -> tuple[Expr, dict[str, Func]]:
    """
    Simplify an expression against a context (a fresh one by default).

    The context is validated first.
    """
    context = context if context is not None else Context()
    context.validate()
    return Simplifier(context, config).simplify(expr, free=free)


def _is_const(e: Expr) -> bool:
    return isinstance(e, Term) and e.is_const()


def _is_zero(e: Expr) -> bool:
    return isinstance(e, Term) and e.is_zero()


def _is_one(e: Expr) -> bool:
    return isinstance(e, Term) and e.is_one()
