# CurveCalc - Context
# Copyright (c) 2024 CurveCalc Contributors. All rights reserved.

"""
Symbol table of declared variables and functions.

A Context is built once per program from the declarations a frontend
produces, then validated with ``check()`` before anything is simplified or
evaluated. Contexts are cheap to clone: expressions and functions are
immutable, so a clone only copies the two name tables.

Example:
    >>> ctx = (Context()
    ...        .fn('sq', ['t'], var('t') * var('t'))
    ...        .let('out', call('sq', var('x')) + 1))
    >>> ctx.check()
    []
    >>> expr, funcs = ctx.simplify('out', free=['x'])
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Union, TYPE_CHECKING
import math

from .expr import Expr, Add, Mul, Pow, Unary, FunctionCall
from .term import Term, RealNumber, ComplexNumber, Variable
from .exceptions import DeclarationError, UndefinedVariableError, UndefinedFunctionError

if TYPE_CHECKING:
    from .config import Config


@dataclass(frozen=True)
class Func:
    """A user-defined function."""
    name: str
    params: tuple[str, ...]
    body: Expr
    recursive: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'params', tuple(self.params))

    @property
    def arity(self) -> int:
        return len(self.params)


@dataclass(frozen=True)
class Let:
    """Declaration ``let name = body``."""
    name: str
    body: Expr


@dataclass(frozen=True)
class Fn:
    """Declaration ``fn [recursive] name(params) = body``."""
    name: str
    params: tuple[str, ...]
    body: Expr
    recursive: bool = False


Declaration = Union[Let, Fn]


# Names bound in every new Context
CONSTANTS: dict[str, Term] = {
    'e': RealNumber(math.e),
    'pi': RealNumber(math.pi),
    'i': ComplexNumber(0.0, 1.0),
}


def iter_calls(expr: Expr) -> Iterator[FunctionCall]:
    """Yield every FunctionCall node in an expression, outermost first."""
    if isinstance(expr, Term):
        return
    elif isinstance(expr, (Add, Mul)):
        for child in expr.children:
            yield from iter_calls(child)
    elif isinstance(expr, Pow):
        yield from iter_calls(expr.base)
        yield from iter_calls(expr.exponent)
    elif isinstance(expr, Unary):
        yield from iter_calls(expr.operand)
    elif isinstance(expr, FunctionCall):
        yield expr
        for arg in expr.args:
            yield from iter_calls(arg)
    else:
        raise TypeError(f"Unknown expression node: {type(expr).__name__}")


@dataclass
class Context:
    """
    Declared variables and functions of one program.

    Attributes:
        vars: Variable name -> bound expression.
        funcs: Function name -> Func.
    """
    vars: dict[str, Expr] = field(default_factory=lambda: dict(CONSTANTS))
    funcs: dict[str, Func] = field(default_factory=dict)
    _checked: bool = field(default=False, repr=False, compare=False)

    @classmethod
    def from_declarations(cls, declarations: Iterable[Declaration]) -> Context:
        """Build a Context from frontend declarations, in order."""
        ctx = cls()
        for decl in declarations:
            if isinstance(decl, Let):
                ctx.def_var(decl.name, decl.body)
            elif isinstance(decl, Fn):
                ctx.def_func(decl.name, decl.recursive, decl.params, decl.body)
            else:
                raise TypeError(f"Unknown declaration: {type(decl).__name__}")
        return ctx

    # Declaration

    def def_var(self, name: str, value: Expr) -> None:
        """Declare or overwrite a variable."""
        if not isinstance(value, Expr):
            raise TypeError(f"Variable '{name}' must be bound to an Expr, got {type(value).__name__}")
        self.vars[name] = value
        self._checked = False

    def def_func(
        self,
        name: str,
        recursive: bool,
        params: Iterable[str],
        body: Expr,
    ) -> None:
        """Declare or overwrite a function."""
        self.funcs[name] = Func(name, tuple(params), body, recursive)
        self._checked = False

    def let(self, name: str, value: Expr) -> Context:
        """Chainable form of def_var."""
        self.def_var(name, value)
        return self

    def fn(self, name: str, params: Iterable[str], body: Expr, recursive: bool = False) -> Context:
        """Chainable form of def_func."""
        self.def_func(name, recursive, params, body)
        return self

    def bind(self, name: str, value: Term) -> None:
        """
        Bind a name to a numeric constant.

        A constant cannot introduce a cycle, so a previously validated
        context stays validated.
        """
        self.vars[name] = value.force_const()

    # Lookup

    def get_var(self, name: str) -> Expr:
        if name not in self.vars:
            raise UndefinedVariableError(name)
        return self.vars[name]

    def get_func(self, name: str) -> Func:
        if name not in self.funcs:
            raise UndefinedFunctionError(name)
        return self.funcs[name]

    def clone(self) -> Context:
        """Independent copy; mutating the clone never affects self."""
        return Context(dict(self.vars), dict(self.funcs), self._checked)

    # Recursion checking

    def check(self) -> list[str]:
        """
        Check for illegal recursion and bad calls.

        Reports, without stopping at the first problem:
        - variables defined in terms of themselves, directly or through
          other variables;
        - functions not declared recursive that can reach a call to
          themselves, directly or through other functions;
        - calls to undeclared functions or with the wrong argument count.

        Returns:
            One message per violation; empty if the context is valid.
        """
        errors = []

        for name, value in self.vars.items():
            if self._var_reaches(value, name):
                errors.append(
                    f"variable '{name}' is defined in terms of itself; "
                    "variables cannot be recursive"
                )

        graph = self._call_graph()
        for name, func in self.funcs.items():
            if not func.recursive and self._func_reaches(graph, name):
                errors.append(
                    f"function '{name}' calls itself but is not declared recursive"
                )

        for owner, expr in self._bodies():
            for node in iter_calls(expr):
                func = self.funcs.get(node.name)
                if func is None:
                    errors.append(f"{owner} calls undeclared function '{node.name}'")
                elif func.arity != len(node.args):
                    errors.append(
                        f"{owner} calls '{node.name}' with {len(node.args)} argument(s) "
                        f"but it takes {func.arity}"
                    )

        self._checked = not errors
        return errors

    def validate(self) -> None:
        """Raise DeclarationError listing every violation, if any."""
        if self._checked:
            return
        errors = self.check()
        if errors:
            raise DeclarationError(errors)

    def _bodies(self) -> Iterator[tuple[str, Expr]]:
        for name, value in self.vars.items():
            yield f"variable '{name}'", value
        for name, func in self.funcs.items():
            yield f"function '{name}'", func.body

    def _var_reaches(self, expr: Expr, target: str) -> bool:
        """Does expr reference target, following variable bindings?"""
        seen: set[str] = set()
        stack = list(expr.free_vars())
        while stack:
            name = stack.pop()
            if name == target:
                return True
            if name in seen or name not in self.vars:
                continue
            seen.add(name)
            stack.extend(self.vars[name].free_vars())
        return False

    def _calls_through_vars(self, expr: Expr, shadowed: frozenset[str]) -> set[str]:
        """Functions called by expr, including through referenced variables."""
        calls = set(expr.called_functions())
        seen: set[str] = set()
        stack = [n for n in expr.free_vars() if n not in shadowed]
        while stack:
            name = stack.pop()
            if name in seen or name not in self.vars:
                continue
            seen.add(name)
            value = self.vars[name]
            calls |= value.called_functions()
            stack.extend(value.free_vars())
        return calls

    def _call_graph(self) -> dict[str, set[str]]:
        return {
            name: self._calls_through_vars(func.body, frozenset(func.params))
            for name, func in self.funcs.items()
        }

    @staticmethod
    def _func_reaches(graph: dict[str, set[str]], target: str) -> bool:
        """Is target reachable from its own callees in the call graph?"""
        seen: set[str] = set()
        stack = list(graph.get(target, ()))
        while stack:
            name = stack.pop()
            if name == target:
                return True
            if name in seen:
                continue
            seen.add(name)
            stack.extend(graph.get(name, ()))
        return False

    # Simplification

    def simplify(
        self,
        name: str,
        free: Iterable[str] = (),
        config: Optional[Config] = None,
    ) -> tuple[Expr, dict[str, Func]]:
        """
        Simplify the variable ``name``.

        Args:
            name: Declared variable to simplify.
            free: Names to leave unexpanded even if declared (e.g. a sweep
                  variable that will be bound later).
            config: Simplifier configuration.

        Returns:
            Tuple of (simplified expression, recursive functions it still needs).

        Raises:
            UndefinedVariableError: If ``name`` is not declared.
            DeclarationError: If the context fails its recursion check.
        """
        from .simplify import Simplifier

        value = self.get_var(name)
        self.validate()
        return Simplifier(self, config).simplify(value, free=free)

    def simplified(self, free: Iterable[str] = (), config: Optional[Config] = None) -> Context:
        """
        Return a new Context with every variable binding simplified.

        Functions are carried over unchanged so recursive calls left in the
        simplified bindings still resolve.
        """
        from .simplify import Simplifier

        self.validate()
        simplifier = Simplifier(self, config)
        result = self.clone()
        for name, value in self.vars.items():
            expr, _ = simplifier.simplify(value, free=free)
            result.vars[name] = expr
        return result
