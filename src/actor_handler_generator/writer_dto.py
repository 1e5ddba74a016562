"""Data transfer objects passed between the generation steps."""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, override

from actor_handler_generator import helper

if TYPE_CHECKING:
    from actor_handler_generator.declarations import TypeDecl
    from actor_handler_generator.signature import SignatureErrorKind, SignatureValidationError


def _split_type_expression(expression: str) -> tuple[str | None, str | None]:
    """Split a type expression into its terminal name and its type arguments.

    Examples:
        "pkg.models.Example" -> ("Example", None)
        "Example[T, U]" -> ("Example", "T, U")
        "Example | None" -> (None, None)
    """
    try:
        node = ast.parse(expression, mode="eval").body
    except SyntaxError:
        return None, None

    type_args = None
    if isinstance(node, ast.Subscript):
        elements = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
        type_args = ", ".join(ast.unparse(element) for element in elements)
        node = node.value

    if isinstance(node, ast.Name):
        return node.id, type_args
    if isinstance(node, ast.Attribute):
        return node.attr, type_args
    return None, None


@dataclass(frozen=True)
class TypeContext:
    """The owning type of a set of handlers.

    Attributes:
        type_expression: How generated code refers to the type (e.g. "Outer.Inner[T]").
        terminal_name: The last segment of the type's path, or None if the type is not a nameable path.
        type_args: The subscript arguments of the type, if any (e.g. "T").
    """

    type_expression: str
    terminal_name: str | None
    type_args: str | None = None

    @classmethod
    def from_expression(cls, expression: str) -> TypeContext:
        """Create a context from any type expression.

        Qualified prefixes are kept in the expression but dropped from the terminal name.

        Args:
            expression: The type expression, e.g. "models.Example" or "Example[T]".

        Returns:
            The context for the type.
        """
        terminal_name, type_args = _split_type_expression(expression)
        return cls(type_expression=expression, terminal_name=terminal_name, type_args=type_args)

    @classmethod
    def from_type_decl(cls, type_decl: TypeDecl) -> TypeContext:
        """Create a context for a decorated class."""
        return cls.from_expression(type_decl.type_expression)

    @property
    def is_nameable(self) -> bool:
        """Whether a trait name can be derived from the type."""
        return self.terminal_name is not None

    @property
    def binding_prefix(self) -> str:
        """The prefix for names of generated classes that belong to this type."""
        if self.terminal_name is not None:
            return self.terminal_name
        return helper.to_identifier(self.type_expression)

    @override
    def __str__(self) -> str:
        return self.type_expression


@dataclass(frozen=True)
class TraitName:
    """The resolved name of a client trait.

    Attributes:
        name: The bare class name (e.g. "ExampleAddr").
        type_args: Type arguments carried over from the owning type, if any.
    """

    name: str
    type_args: str | None = None

    @property
    def reference(self) -> str:
        """The expression that refers to the trait, with its type arguments."""
        if self.type_args:
            return f"{self.name}[{self.type_args}]"
        return self.name

    @override
    def __str__(self) -> str:
        return self.reference


class ArtifactKind(Enum):
    """The kinds of generated declarations."""

    DISPATCH_BINDING = "dispatch_binding"
    TRAIT_DECLARATION = "trait_declaration"
    TRAIT_IMPLEMENTATION = "trait_implementation"


@dataclass(frozen=True)
class GeneratedArtifact:
    """One generated declaration.

    Attributes:
        kind: What the declaration is.
        name: The name of the generated class.
        lines: The source lines of the declaration, not indented.
        runtime_symbols: Runtime module symbols the declaration refers to.
        typing_imports: Names the declaration needs from `typing`.
    """

    kind: ArtifactKind
    name: str
    lines: tuple[str, ...]
    runtime_symbols: frozenset[str] = frozenset()
    typing_imports: frozenset[str] = frozenset()

    def render(self) -> str:
        """The source text of the declaration."""
        return "\n".join(self.lines)


@dataclass(frozen=True)
class Diagnostic:
    """A handler method that was skipped, reported at the decorated class.

    Attributes:
        type_name: The qualified name of the owning class.
        method_name: The rejected method.
        kind: Why the method was rejected.
        message: A human readable description.
        lineno: The line of the `actor_handler` decorator.
    """

    type_name: str
    method_name: str
    kind: SignatureErrorKind
    message: str
    lineno: int = 0

    @classmethod
    def from_error(cls, error: SignatureValidationError, type_name: str, lineno: int) -> Diagnostic:
        """Create a diagnostic for a rejected method."""
        return cls(
            type_name=type_name,
            method_name=error.method_name,
            kind=error.kind,
            message=error.message,
            lineno=lineno,
        )

    def format(self, path: str) -> str:
        """Format the diagnostic like a compiler error."""
        return f"{path}:{self.lineno}: error: {self.message}"

    @override
    def __str__(self) -> str:
        return self.message


@dataclass
class GeneratedArtifactSet:
    """Everything generated for one type, in output order.

    Bindings come first in source method order, followed by the trait declaration and the trait
    implementation. Diagnostics are kept apart from the artifacts.
    """

    artifacts: list[GeneratedArtifact] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def add(self, artifact: GeneratedArtifact | None) -> None:
        """Append an artifact; None is ignored for suppressed declarations."""
        if artifact is not None:
            self.artifacts.append(artifact)

    def add_diagnostic(self, diagnostic: Diagnostic) -> None:
        """Append a diagnostic."""
        self.diagnostics.append(diagnostic)

    def _of_kind(self, kind: ArtifactKind) -> list[GeneratedArtifact]:
        return [artifact for artifact in self.artifacts if artifact.kind is kind]

    @property
    def bindings(self) -> list[GeneratedArtifact]:
        """The dispatch bindings."""
        return self._of_kind(ArtifactKind.DISPATCH_BINDING)

    @property
    def declaration(self) -> GeneratedArtifact | None:
        """The trait declaration, unless it was suppressed."""
        declarations = self._of_kind(ArtifactKind.TRAIT_DECLARATION)
        return declarations[0] if declarations else None

    @property
    def implementation(self) -> GeneratedArtifact | None:
        """The trait implementation, unless it was suppressed."""
        implementations = self._of_kind(ArtifactKind.TRAIT_IMPLEMENTATION)
        return implementations[0] if implementations else None

    @property
    def runtime_symbols(self) -> set[str]:
        """All runtime symbols referred to by the artifacts."""
        return {symbol for artifact in self.artifacts for symbol in artifact.runtime_symbols}

    @property
    def typing_imports(self) -> set[str]:
        """All names the artifacts need from `typing`."""
        return {name for artifact in self.artifacts for name in artifact.typing_imports}

    def render(self) -> str:
        """The source text of all artifacts, followed by one comment line per diagnostic."""
        blocks = [artifact.render() for artifact in self.artifacts]
        if self.diagnostics:
            blocks.append("\n".join(f"# error: {diagnostic.message}" for diagnostic in self.diagnostics))
        return "\n\n\n".join(blocks)

    @override
    def __repr__(self) -> str:
        """Return a readable representation for debugging."""
        return (
            f"GeneratedArtifactSet("
            f"bindings={len(self.bindings)}, "
            f"declaration={self.declaration is not None}, "
            f"implementation={self.implementation is not None}, "
            f"diagnostics={len(self.diagnostics)})"
        )
