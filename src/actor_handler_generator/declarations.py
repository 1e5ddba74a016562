"""Parsed declarations of actor classes, read from Python source with `ast`."""

from __future__ import annotations

import ast
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal, override

from actor_handler_generator.errors import SourceParseError
from actor_handler_generator.runtime_types import DECORATOR_NAME, NON_HANDLER_DECORATORS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypeRef:
    """A type annotation, kept as its source expression."""

    expression: str

    @classmethod
    def from_node(cls, node: ast.expr) -> TypeRef:
        """Build a type reference from an annotation node.

        A quoted forward reference such as `'Greeting'` is unquoted, since generated code uses the
        expression at runtime.
        """
        if isinstance(node, ast.Constant) and isinstance(node.value, str):
            try:
                node = ast.parse(node.value.strip(), mode="eval").body
            except SyntaxError:
                logger.warning("Keeping unparsable string annotation %r as written.", node.value)
        return cls(ast.unparse(node))

    @override
    def __str__(self) -> str:
        return self.expression


@dataclass(frozen=True)
class ReceiverParam:
    """The receiver (`self`) of an instance method."""

    name: str
    annotation: TypeRef | None = None


@dataclass(frozen=True)
class TypedParam:
    """A positional parameter bound to a plain name with an explicit annotation."""

    name: str
    annotation: TypeRef


@dataclass(frozen=True)
class UntypedParam:
    """A positional parameter without an annotation."""

    name: str


@dataclass(frozen=True)
class KeywordOnlyParam:
    """A parameter declared after `*` or `*args`."""

    name: str
    annotation: TypeRef | None = None


@dataclass(frozen=True)
class VariadicParam:
    """A `*args` or `**kwargs` parameter."""

    name: str
    kind: Literal["*", "**"]
    annotation: TypeRef | None = None


Parameter = ReceiverParam | TypedParam | UntypedParam | KeywordOnlyParam | VariadicParam


@dataclass(frozen=True)
class MethodDecl:
    """A method declared in the body of an actor class."""

    name: str
    params: tuple[Parameter, ...]
    returns: TypeRef | None = None
    is_async: bool = False
    lineno: int = 0

    @property
    def arity(self) -> int:
        """The number of declared parameters of any kind."""
        return len(self.params)


@dataclass(frozen=True)
class TypeDecl:
    """A class marked with the `actor_handler` decorator.

    Attributes:
        name: The class name.
        qualified_name: The dotted name of the class within its module (e.g. `Outer.Inner`).
        type_params: Type parameters taken from `Generic[...]` or `Protocol[...]` bases.
        methods: Candidate handler methods in declaration order.
        decorator: The decorator node, read later for the generation policy.
        lineno: The line of the decorator, which is where diagnostics are reported.
    """

    name: str
    qualified_name: str
    type_params: tuple[str, ...] = ()
    methods: tuple[MethodDecl, ...] = ()
    decorator: ast.expr | None = field(default=None, compare=False)
    lineno: int = 0

    @property
    def type_expression(self) -> str:
        """The expression that refers to this type from module scope."""
        if self.type_params:
            return f"{self.qualified_name}[{', '.join(self.type_params)}]"
        return self.qualified_name


def _decorator_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def find_actor_decorator(node: ast.ClassDef) -> ast.expr | None:
    """Return the `actor_handler` decorator of a class, in any of its accepted forms.

    Accepted forms are `@actor_handler`, `@actor_handler(...)` and attribute access such as
    `@generator.actor_handler(...)`.
    """
    for decorator in node.decorator_list:
        if _decorator_name(decorator) == DECORATOR_NAME:
            return decorator
    return None


def parse_parameters(args: ast.arguments, has_receiver: bool) -> tuple[Parameter, ...]:
    """Convert the arguments of a function definition into parameter variants.

    Args:
        args (ast.arguments): The arguments node of the function.
        has_receiver (bool): Whether the first positional parameter is the receiver.

    Returns:
        tuple[Parameter, ...]: The parameters in declaration order.
    """
    params: list[Parameter] = []

    for index, arg in enumerate([*args.posonlyargs, *args.args]):
        annotation = TypeRef.from_node(arg.annotation) if arg.annotation is not None else None

        if index == 0 and has_receiver:
            params.append(ReceiverParam(arg.arg, annotation))
        elif annotation is None:
            params.append(UntypedParam(arg.arg))
        else:
            params.append(TypedParam(arg.arg, annotation))

    if args.vararg is not None:
        params.append(_variadic(args.vararg, "*"))

    for arg in args.kwonlyargs:
        annotation = TypeRef.from_node(arg.annotation) if arg.annotation is not None else None
        params.append(KeywordOnlyParam(arg.arg, annotation))

    if args.kwarg is not None:
        params.append(_variadic(args.kwarg, "**"))

    return tuple(params)


def _variadic(arg: ast.arg, kind: Literal["*", "**"]) -> VariadicParam:
    annotation = TypeRef.from_node(arg.annotation) if arg.annotation is not None else None
    return VariadicParam(arg.arg, kind, annotation)


def _is_candidate(node: ast.FunctionDef | ast.AsyncFunctionDef) -> bool:
    if node.name.startswith("__") and node.name.endswith("__"):
        return False
    return not any(_decorator_name(d) in NON_HANDLER_DECORATORS for d in node.decorator_list)


def parse_method(node: ast.FunctionDef | ast.AsyncFunctionDef) -> MethodDecl:
    """Build a method declaration from a function definition found in a class body."""
    return MethodDecl(
        name=node.name,
        params=parse_parameters(node.args, has_receiver=True),
        returns=TypeRef.from_node(node.returns) if node.returns is not None else None,
        is_async=isinstance(node, ast.AsyncFunctionDef),
        lineno=node.lineno,
    )


def _generic_params(node: ast.ClassDef) -> tuple[str, ...]:
    for base in node.bases:
        if isinstance(base, ast.Subscript) and _decorator_name(base.value) in ("Generic", "Protocol"):
            elements = base.slice.elts if isinstance(base.slice, ast.Tuple) else [base.slice]
            return tuple(ast.unparse(element) for element in elements)
    return ()


def parse_type(node: ast.ClassDef, qualified_name: str | None = None) -> TypeDecl:
    """Build a type declaration from a class definition.

    Args:
        node (ast.ClassDef): The class definition.
        qualified_name (str | None, optional): The dotted name of the class. Defaults to the class name.

    Returns:
        TypeDecl: The parsed declaration with its candidate handler methods.
    """
    decorator = find_actor_decorator(node)
    methods = tuple(
        parse_method(item)
        for item in node.body
        if isinstance(item, ast.FunctionDef | ast.AsyncFunctionDef) and _is_candidate(item)
    )

    return TypeDecl(
        name=node.name,
        qualified_name=qualified_name or node.name,
        type_params=_generic_params(node),
        methods=methods,
        decorator=decorator,
        lineno=decorator.lineno if decorator is not None else node.lineno,
    )


def _walk_classes(body: list[ast.stmt], prefix: str = "") -> Iterator[tuple[ast.ClassDef, str]]:
    for item in body:
        if isinstance(item, ast.ClassDef):
            qualified_name = f"{prefix}{item.name}"
            yield item, qualified_name
            yield from _walk_classes(item.body, f"{qualified_name}.")


def parse_module(source: str, filename: str = "<unknown>") -> list[TypeDecl]:
    """Parse a module and return every class marked with the `actor_handler` decorator.

    Classes nested in other classes are included with their dotted name. Classes defined inside
    functions are not reachable from module scope and are ignored.

    Args:
        source (str): The module source.
        filename (str, optional): The file name used in error messages. Defaults to "<unknown>".

    Raises:
        SourceParseError: If the source is not valid Python.

    Returns:
        list[TypeDecl]: The decorated classes in source order.
    """
    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as e:
        raise SourceParseError(f"Could not parse '{filename}': {e}") from e

    types: list[TypeDecl] = []
    for node, qualified_name in _walk_classes(tree.body):
        if find_actor_decorator(node) is None:
            continue

        type_decl = parse_type(node, qualified_name)
        logger.debug("Found actor class '%s' with %d candidate method(s).", qualified_name, len(type_decl.methods))
        types.append(type_decl)

    return types
