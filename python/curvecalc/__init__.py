# CurveCalc
# Copyright (c) 2024 CurveCalc Contributors. All rights reserved.

"""
CurveCalc - Expression Simplification and Grid Sampling.

This package evaluates user-defined real and complex expressions, with named
variables and (optionally recursive) functions, at single points or over
dense 1-D and 2-D grids.

Example:
    >>> import curvecalc as cc
    >>> ctx = (cc.Context()
    ...        .fn('sq', ['t'], cc.var('t') ** 2)
    ...        .let('out', cc.call('sq', cc.var('x')) + 1))
    >>> cc.Sampler(ctx).sample_1d('out', (-1.0, 1.0), 2)
    [(-1.0, RealNumber(value=2.0)), (0.0, RealNumber(value=1.0)), (1.0, RealNumber(value=2.0))]

Key Features:
    - Variable expansion and inlining of non-recursive functions
    - Constant folding over a real/complex numeric tower
    - Batch recursion checking with one message per violation
    - Order-preserving parallel sampling
"""

import logging

__version__ = "0.1.0"

# Expression types and constructors (expr must load before term)
from .expr import (
    Expr,
    Add,
    Mul,
    Pow,
    Unary,
    UnaryKind,
    FunctionCall,
    var,
    num,
    const,
    add,
    mul,
    sub,
    div,
    pow_,
    neg,
    inv,
    call,
    unary,
    abs_,
    ln,
    sqrt,
    sin,
    cos,
    tan,
    sinh,
    cosh,
    tanh,
    asin,
    acos,
    atan,
    asinh,
    acosh,
    atanh,
)

# Terms
from .term import Term, RealNumber, ComplexNumber, Variable, apply_unary

# Context
from .context import Context, Func, Let, Fn, CONSTANTS

# Configuration
from .config import Config

# Pipeline
from .simplify import Simplifier, simplify
from .evaluate import Evaluator, evaluate
from .grid import Axis, normalize_axis
from .sampler import Sampler, sample_1d, sample_2d
from .result import format_sample, format_samples, samples_to_array

# Exceptions
from .exceptions import (
    CurveCalcError,
    DeclarationError,
    ValueCycleError,
    UndefinedVariableError,
    UndefinedFunctionError,
    ArityError,
    NotConstantError,
    EvaluationBudgetExceeded,
)

# Silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    "__version__",
    # Expression types
    "Expr",
    "Add",
    "Mul",
    "Pow",
    "Unary",
    "UnaryKind",
    "FunctionCall",
    # Expression constructors
    "var",
    "num",
    "const",
    "add",
    "mul",
    "sub",
    "div",
    "pow_",
    "neg",
    "inv",
    "call",
    "unary",
    "abs_",
    "ln",
    "sqrt",
    "sin",
    "cos",
    "tan",
    "sinh",
    "cosh",
    "tanh",
    "asin",
    "acos",
    "atan",
    "asinh",
    "acosh",
    "atanh",
    # Terms
    "Term",
    "RealNumber",
    "ComplexNumber",
    "Variable",
    "apply_unary",
    # Context
    "Context",
    "Func",
    "Let",
    "Fn",
    "CONSTANTS",
    # Configuration
    "Config",
    # Pipeline
    "Simplifier",
    "simplify",
    "Evaluator",
    "evaluate",
    "Axis",
    "normalize_axis",
    "Sampler",
    "sample_1d",
    "sample_2d",
    "format_sample",
    "format_samples",
    "samples_to_array",
    # Exceptions
    "CurveCalcError",
    "DeclarationError",
    "ValueCycleError",
    "UndefinedVariableError",
    "UndefinedFunctionError",
    "ArityError",
    "NotConstantError",
    "EvaluationBudgetExceeded",
]
