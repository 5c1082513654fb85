# CurveCalc - Numeric Evaluation
# Copyright (c) 2024 CurveCalc Contributors. All rights reserved.

"""
Numeric evaluation of expressions against a Context.

Evaluation substitutes bound values through the tree and applies the term
arithmetic of ``curvecalc.term``. It returns ``None`` rather than raising when
a value cannot be computed (an unbound variable or an unknown function), so a
sampler can record the miss for one point and carry on.

Function parameters are scoped lexically: inside a body, a parameter always
shadows a global variable of the same name, and global bindings are always
evaluated in global scope.

Recursive functions are evaluated from scratch on every call. Because the
expression language has no conditionals, a recursive call chain only ends when
the budget in Config runs out; that raises EvaluationBudgetExceeded.

Example:
    >>> ctx = Context().let('y', var('x') * 2)
    >>> ctx.bind('x', RealNumber(1.5))
    >>> evaluate(var('y'), ctx)
    RealNumber(value=3.0)
"""

from __future__ import annotations
from typing import Mapping, Optional

from .expr import Expr, Add, Mul, Pow, Unary, FunctionCall
from .term import Term, Number, Variable, add, mul, power, apply_unary
from .context import Context
from .config import Config
from .exceptions import ArityError, EvaluationBudgetExceeded


# Parameter bindings of the function body being evaluated
Scope = Mapping[str, Number]

_GLOBAL: Scope = {}


class Evaluator:
    """
    Evaluates expressions in one Context under a step and depth budget.

    The budget is reset for each call to ``evaluate``.
    """

    def __init__(self, context: Context, config: Optional[Config] = None):
        self.context = context
        self.config = config or Config()
        self._steps = 0
        self._depth = 0

    def evaluate(self, expr: Expr) -> Optional[Number]:
        """
        Evaluate an expression to a numeric term.

        Returns:
            The value, or None if a needed variable or function is undefined.

        Raises:
            EvaluationBudgetExceeded: If evaluation visits more than
                ``max_eval_steps`` nodes or nests calls deeper than ``max_depth``.
            ArityError: If a function is called with the wrong argument count.
        """
        self._steps = 0
        self._depth = 0
        return self._eval(expr, _GLOBAL)

    def _eval(self, expr: Expr, scope: Scope) -> Optional[Number]:
        self._steps += 1
        if self._steps > self.config.max_eval_steps:
            raise EvaluationBudgetExceeded(
                f"evaluation exceeded {self.config.max_eval_steps} steps",
                self._steps, self._depth,
            )

        if isinstance(expr, Variable):
            if expr.name in scope:
                return scope[expr.name]
            value = self.context.vars.get(expr.name)
            if value is None:
                return None
            # check() guarantees variable chains end; only calls count as depth
            return self._eval(value, _GLOBAL)
        elif isinstance(expr, Term):
            return expr.force_const()
        elif isinstance(expr, (Add, Mul)):
            op = add if isinstance(expr, Add) else mul
            acc = None
            for child in expr.children:
                v = self._eval(child, scope)
                if v is None:
                    return None
                acc = v if acc is None else op(acc, v)
            return acc
        elif isinstance(expr, Pow):
            base = self._eval(expr.base, scope)
            if base is None:
                return None
            exponent = self._eval(expr.exponent, scope)
            if exponent is None:
                return None
            return power(base, exponent)
        elif isinstance(expr, Unary):
            operand = self._eval(expr.operand, scope)
            if operand is None:
                return None
            return apply_unary(expr.kind, operand)
        elif isinstance(expr, FunctionCall):
            func = self.context.funcs.get(expr.name)
            if func is None:
                return None
            if func.arity != len(expr.args):
                raise ArityError(expr.name, func.arity, len(expr.args))
            args = []
            for arg in expr.args:
                v = self._eval(arg, scope)
                if v is None:
                    return None
                args.append(v)
            return self._nested(func.body, dict(zip(func.params, args)))
        raise TypeError(f"Unknown expression node: {type(expr).__name__}")

    def _nested(self, expr: Expr, scope: Scope) -> Optional[Number]:
        """Evaluate a function body one call level deeper."""
        self._depth += 1
        try:
            if self._depth > self.config.max_depth:
                raise EvaluationBudgetExceeded(
                    f"function calls nested deeper than {self.config.max_depth} levels",
                    self._steps, self._depth,
                )
            return self._eval(expr, scope)
        finally:
            self._depth -= 1


def evaluate(expr: Expr, context: Context, config: Optional[Config] = None) -> Optional[Number]:
    """Evaluate ``expr`` in ``context``; see Evaluator.evaluate."""
    return Evaluator(context, config).evaluate(expr)
