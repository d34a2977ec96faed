"""Canonical source text for encoded functions.

Functions are encoded as their source code. Two functions that differ only in
comments or layout should encode identically, so the source is canonicalized
first: JavaScript sources have their comments and line breaks removed, Python
sources are re-rendered from their syntax tree.
"""

from __future__ import annotations

import ast
import copy
import inspect
import re
import warnings
from functools import lru_cache
from types import CodeType, MethodType
from typing import Any, Callable, Final

from telejson._errors import FunctionSourceWarning
from telejson.constants import (
    JS_NOOP_FUNCTION_SOURCE,
    OPAQUE_FUNCTION_PATTERN,
    PY_NOOP_FUNCTION_SOURCE,
)
from telejson.jstypes.jsfunction import JSFunction

_LINE_BREAK_INDENT: Final = re.compile(r"\n\s*")
_QUOTES: Final = "\"'`"


def remove_comments(code: str) -> str:
    """Remove JavaScript comments, leaving strings and RegExp literals intact.

    This is a scanner, not a parser. It tracks four states: inside a string
    or template literal, a block comment, a line comment, or a RegExp literal.
    A `/` starts a comment or RegExp only when not already in one of these.
    Unusual code, like a division followed later on the same line by `//`
    inside a string, can be misread.

    >>> remove_comments("a = 1; // one\\nb = '//two'; /* three */")
    "a = 1; \\nb = '//two'; "
    """
    in_quote_char: str | None = None
    in_block_comment = False
    in_line_comment = False
    in_regex_literal = False
    kept: list[str] = []

    for i, char in enumerate(code):
        next_char = code[i + 1] if i + 1 < len(code) else ""
        prev_char = code[i - 1] if i >= 1 else ""
        prev_prev_char = code[i - 2] if i >= 2 else ""

        if not (
            in_quote_char or in_block_comment or in_line_comment or in_regex_literal
        ):
            if char in _QUOTES:
                in_quote_char = char
            elif char == "/" and next_char == "*":
                in_block_comment = True
            elif char == "/" and next_char == "/":
                in_line_comment = True
            elif char == "/":
                in_regex_literal = True
        else:
            if in_quote_char and (
                (char == in_quote_char and prev_char != "\\")
                or (char == "\n" and in_quote_char != "`")
            ):
                in_quote_char = None
            if in_regex_literal and (
                (char == "/" and prev_char != "\\") or char == "\n"
            ):
                in_regex_literal = False
            if in_block_comment and prev_char == "/" and prev_prev_char == "*":
                in_block_comment = False
            if in_line_comment and char == "\n":
                in_line_comment = False

        if not in_block_comment and not in_line_comment:
            kept.append(char)
    return "".join(kept)


def normalize_source(code: str) -> str:
    """Canonicalize JavaScript function source code.

    Comments are removed, then each line break and the indentation following
    it are removed, and the result is trimmed.

    Removing line breaks can bring two `/` characters together, creating a
    new comment, so this repeats until the text stops changing. The result is
    therefore unchanged by normalizing it again.

    >>> normalize_source('''function add(a, b) {
    ...   // Add the numbers
    ...   return a + b; /* done */
    ... }''')
    'function add(a, b) {return a + b; }'
    """
    while True:
        normalized = _LINE_BREAK_INDENT.sub("", remove_comments(code)).strip()
        if normalized == code:
            return normalized
        code = normalized


def python_function_source(fn: Callable[..., Any]) -> str | None:
    """Get the canonical source code of a Python function, lambda or class.

    The definition is located in the syntax tree of its source file and
    re-rendered with `ast.unparse()`, which drops comments, decorators and
    formatting differences. Definitions are found by position rather than by
    name, so lambdas sharing a line or a name are told apart.

    Returns None when the source is not available, for example for builtins,
    `functools.partial` objects and functions created by `exec()`.
    """
    if isinstance(fn, MethodType):
        fn = fn.__func__
    fn = inspect.unwrap(fn)
    try:
        lines, line_index = inspect.findsource(fn)
    except (OSError, TypeError):
        return None

    module = _parse_module("".join(lines))
    if module is None:
        return None
    code = getattr(fn, "__code__", None)
    node: ast.AST | None
    if getattr(fn, "__name__", None) == "<lambda>":
        node = None if code is None else _find_lambda(module, code)
    else:
        first_line = line_index + 1 if code is None else code.co_firstlineno
        node = _find_definition(module, getattr(fn, "__name__", None), first_line)
    if node is None:
        return None
    return ast.unparse(node)


@lru_cache(maxsize=16)
def _parse_module(source: str) -> ast.Module | None:
    # Cached trees are shared, nodes taken from them must be copied to modify.
    try:
        return ast.parse(source)
    except SyntaxError:
        return None


def _find_definition(
    module: ast.Module, name: str | None, first_line: int
) -> ast.FunctionDef | ast.AsyncFunctionDef | ast.ClassDef | None:
    # The first line of a decorated definition is its first decorator's.
    for node in ast.walk(module):
        if (
            isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef))
            and node.name == name
            and min(d.lineno for d in [*node.decorator_list, node]) == first_line
        ):
            node = copy.copy(node)
            node.decorator_list = []
            return node
    return None


def _find_lambda(module: ast.Module, code: CodeType) -> ast.Lambda | None:
    lambdas = [
        node
        for node in ast.walk(module)
        if isinstance(node, ast.Lambda) and node.lineno == code.co_firstlineno
    ]
    spans = [
        ((line, col), (end_line, end_col))
        for line, end_line, col, end_col in code.co_positions()
        if line is not None
        and end_line is not None
        and col is not None
        and end_col is not None
        and (line, col) != (end_line, end_col)
    ]
    # The code of a lambda is its body. The body of an enclosing lambda on the
    # same line contains it too, the innermost lambda starts last.
    containing = [
        node
        for node in lambdas
        if all(
            (node.body.lineno, node.body.col_offset) <= start
            and end <= (node.body.end_lineno or 0, node.body.end_col_offset or 0)
            for start, end in spans
        )
    ]
    if not spans or not containing:
        # Without column information (python -X no_debug_ranges) only a
        # lambda that is alone on its line can be identified.
        return lambdas[0] if len(lambdas) == 1 else None
    return max(containing, key=lambda node: (node.lineno, node.col_offset))


def function_source(fn: Callable[..., Any]) -> tuple[str, str]:
    """Get the name and canonical source code to encode a function with.

    Functions whose source is unavailable or not meaningful (native functions
    and bundler import stubs) are replaced by a function that does nothing,
    keeping only the name.
    """
    if isinstance(fn, JSFunction):
        source = fn.source if fn.canonical else normalize_source(fn.source)
        if OPAQUE_FUNCTION_PATTERN.search(source):
            source = JS_NOOP_FUNCTION_SOURCE
        return fn.name, source

    name = getattr(fn, "__name__", type(fn).__name__)
    py_source = python_function_source(fn)
    if py_source is None:
        warnings.warn(
            FunctionSourceWarning(
                f"The source code of {fn!r} is not available, it will be "
                f"encoded as a function that does nothing"
            ),
            stacklevel=2,
        )
        return name, PY_NOOP_FUNCTION_SOURCE
    return name, py_source
