"""Turn revived function source code back into callables.

**Security:** revived functions run code taken from the decoded data. The
restricted evaluator only offers a small set of builtins to that code, but
Python cannot be sandboxed this way against a determined attacker (for
example via attribute access on literals). Never call functions decoded from
untrusted data, or decode untrusted data with `function_evaluator=None`.
"""

from __future__ import annotations

import ast
import builtins
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Final, Protocol

from telejson._errors import FunctionEvaluationError

SAFE_BUILTIN_NAMES: Final = frozenset(
    {
        "abs",
        "all",
        "any",
        "ascii",
        "bin",
        "bool",
        "bytes",
        "callable",
        "chr",
        "complex",
        "dict",
        "divmod",
        "enumerate",
        "filter",
        "float",
        "format",
        "frozenset",
        "hash",
        "hex",
        "int",
        "isinstance",
        "issubclass",
        "iter",
        "len",
        "list",
        "map",
        "max",
        "min",
        "next",
        "oct",
        "ord",
        "pow",
        "range",
        "repr",
        "reversed",
        "round",
        "set",
        "slice",
        "sorted",
        "str",
        "sum",
        "tuple",
        "zip",
        "ArithmeticError",
        "AssertionError",
        "Exception",
        "IndexError",
        "KeyError",
        "LookupError",
        "StopIteration",
        "TypeError",
        "ValueError",
        "ZeroDivisionError",
        "__build_class__",
        "False",
        "None",
        "True",
    }
)
"""Builtins available to revived functions. Nothing that does I/O, imports or
reflects on objects."""

REVIVED_MODULE_NAME: Final = "telejson.revived"
"""The `__module__` of classes and functions created by revived source."""

SAFE_BUILTINS: Final[Mapping[str, object]] = MappingProxyType(
    {
        name: getattr(builtins, name)
        for name in SAFE_BUILTIN_NAMES
        if hasattr(builtins, name)
    }
)


class FunctionEvaluator(Protocol):
    """
    The signature of a function that evaluates revived function source code.

    Receives the source and name of a decoded function, returns the callable
    it defines.

    Raises
    ------
    FunctionEvaluationError
        If the source can't be evaluated.
    """

    def __call__(self, source: str, name: str, /) -> Callable[..., Any]: ...


def restricted_evaluator(source: str, name: str) -> Callable[..., Any]:
    """Evaluate Python function source with only `SAFE_BUILTINS` available.

    `source` must be a single expression evaluating to a callable (such as a
    lambda) or a single `def`/`class` statement. Each evaluation gets a new,
    empty global namespace.

    >>> restricted_evaluator("lambda a, b: a + b", "<lambda>")(1, 2)
    3
    >>> restricted_evaluator("def double(x):\\n    return x * 2", "double")(4)
    8
    """
    try:
        module = ast.parse(source, filename=f"<revived function {name}>")
    except SyntaxError as e:
        raise FunctionEvaluationError(
            f"Function source is not valid Python: {e}", name=name, source=source
        ) from e

    if len(module.body) != 1:
        raise FunctionEvaluationError(
            "Function source must contain exactly one expression or definition",
            name=name,
            source=source,
        )

    namespace: dict[str, Any] = {
        "__builtins__": dict(SAFE_BUILTINS),
        "__name__": REVIVED_MODULE_NAME,
    }
    (statement,) = module.body
    try:
        if isinstance(statement, ast.Expr):
            code = compile(
                ast.Expression(statement.value), f"<revived function {name}>", "eval"
            )
            result = eval(code, namespace)  # noqa: S307
        elif isinstance(
            statement, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)
        ):
            exec(compile(module, f"<revived function {name}>", "exec"), namespace)  # noqa: S102
            result = namespace[statement.name]
        else:
            raise FunctionEvaluationError(
                "Function source must be an expression or a definition",
                name=name,
                source=source,
            )
    except FunctionEvaluationError:
        raise
    except Exception as e:
        raise FunctionEvaluationError(
            f"Function source raised an error when evaluated: {e!r}",
            name=name,
            source=source,
        ) from e

    if not callable(result):
        raise FunctionEvaluationError(
            f"Function source evaluated to a non-callable {type(result).__name__}",
            name=name,
            source=source,
        )
    return result
