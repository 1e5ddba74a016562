"""Helpers for building declarations from source snippets in tests."""

from __future__ import annotations

import ast
import textwrap

from actor_handler_generator.declarations import MethodDecl, TypeDecl, parse_method, parse_type


def parse_class(source: str) -> TypeDecl:
    """Parse the first class of a source snippet.

    Args:
        source: Source code containing a class definition, may be indented.

    Returns:
        The parsed type declaration.
    """
    tree = ast.parse(textwrap.dedent(source))
    node = next(n for n in tree.body if isinstance(n, ast.ClassDef))
    return parse_type(node)


def parse_single_method(source: str) -> MethodDecl:
    """Parse a single method definition, as if it were declared in a class body.

    Args:
        source: Source code of one `def` or `async def`.

    Returns:
        The parsed method declaration.
    """
    tree = ast.parse(textwrap.dedent(source))
    node = tree.body[0]
    assert isinstance(node, ast.FunctionDef | ast.AsyncFunctionDef)
    return parse_method(node)
