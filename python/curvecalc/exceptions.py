# CurveCalc - Exceptions
# Copyright (c) 2024 CurveCalc Contributors. All rights reserved.

"""Exception hierarchy for CurveCalc."""

from __future__ import annotations
from typing import Optional, Iterable


class CurveCalcError(Exception):
    """Base class for all CurveCalc exceptions."""
    pass


class DeclarationError(CurveCalcError):
    """
    Raised when a context fails its recursion check.

    Every violation found is carried in ``errors``, one message per
    offending variable or function.
    """

    def __init__(self, errors: Iterable[str]):
        self.errors = list(errors)
        summary = f"{len(self.errors)} declaration error(s)"
        if self.errors:
            summary += ":\n  " + "\n  ".join(self.errors)
        super().__init__(summary)


class ValueCycleError(CurveCalcError):
    """Raised when variable expansion runs into a value cycle."""

    def __init__(self, name: str, chain: Optional[list[str]] = None):
        self.name = name
        self.chain = list(chain or [])
        message = f"Variable '{name}' is defined in terms of itself"
        if self.chain:
            message += f" ({' -> '.join(self.chain + [name])})"
        super().__init__(message)


class UndefinedVariableError(CurveCalcError):
    """Raised when a variable is requested by name but was never declared."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Variable '{name}' is not declared")


class UndefinedFunctionError(CurveCalcError):
    """Raised when a call references a function that was never declared."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Function '{name}' is not declared")


class ArityError(CurveCalcError):
    """Raised when a function is called with the wrong number of arguments."""

    def __init__(self, name: str, expected: int, got: int):
        self.name = name
        self.expected = expected
        self.got = got
        super().__init__(
            f"Function '{name}' takes {expected} argument(s) but was called with {got}"
        )


class NotConstantError(CurveCalcError):
    """Raised when a non-constant term is forced into a number."""
    pass


class EvaluationBudgetExceeded(CurveCalcError):
    """Raised when an evaluation runs past its step or depth budget."""

    def __init__(self, message: str, steps: int, depth: int):
        super().__init__(message)
        self.steps = steps
        self.depth = depth
