"""Expand actor classes into dispatch bindings and client traits.

Note: The generated code requires an actor runtime module that provides `Handler`, `Context`,
`Addr`, `Request`, `RecipientRequest` and `MessageResult`.
"""

from __future__ import annotations

import logging
import pathlib
from collections.abc import Sequence
from typing import Literal, cast

from actor_handler_generator.client import expand_client_trait
from actor_handler_generator.declarations import MethodDecl, TypeDecl, parse_module
from actor_handler_generator.dispatch import expand_dispatch_binding
from actor_handler_generator.policy import GenerationPolicy, policy_from_decorator
from actor_handler_generator.runtime_types import DEFAULT_RUNTIME_MODULE
from actor_handler_generator.signature import HandlerDescriptor, SignatureValidationError, parse_handler_descriptor
from actor_handler_generator.writer_dto import Diagnostic, GeneratedArtifactSet, TypeContext

logger = logging.getLogger(__name__)

GENERATED_SECTION_MARKER = "# --- Generated by actor-handler-generator. Do not edit below this line. ---"


def partition_handlers(
    methods: Sequence[MethodDecl],
) -> tuple[list[HandlerDescriptor], list[SignatureValidationError]]:
    """Validate every method and split the results into descriptors and errors, keeping source order."""
    descriptors: list[HandlerDescriptor] = []
    errors: list[SignatureValidationError] = []

    for method in methods:
        result = parse_handler_descriptor(method)
        if isinstance(result, SignatureValidationError):
            errors.append(result)
        else:
            descriptors.append(result)

    return descriptors, errors


def expand_type_handlers(
    type_context: TypeContext,
    methods: Sequence[MethodDecl],
    policy: GenerationPolicy,
    runtime_module: str = DEFAULT_RUNTIME_MODULE,
    lineno: int = 0,
) -> GeneratedArtifactSet:
    """Run one generation pass over the methods of a type.

    Every method is validated on its own. A rejected method contributes no binding and no trait
    method, only a diagnostic; its siblings are generated as usual.

    Args:
        type_context (TypeContext): The owning type.
        methods (Sequence[MethodDecl]): The declared methods in source order.
        policy (GenerationPolicy): The generation policy.
        runtime_module (str, optional): The module that provides the actor runtime. Defaults to "actor_runtime".
        lineno (int, optional): The line diagnostics are attached to. Defaults to 0.

    Raises:
        TraitNameError: If no trait name can be derived for the type.

    Returns:
        GeneratedArtifactSet: The bindings, the client trait parts and the diagnostics.
    """
    descriptors, errors = partition_handlers(methods)

    artifacts = GeneratedArtifactSet()
    for descriptor in descriptors:
        artifacts.add(expand_dispatch_binding(type_context, descriptor, runtime_module))

    declaration, implementation = expand_client_trait(type_context, descriptors, policy, runtime_module)
    artifacts.add(declaration)
    artifacts.add(implementation)

    for error in errors:
        artifacts.add_diagnostic(Diagnostic.from_error(error, type_context.type_expression, lineno))

    logger.debug("Expanded '%s': %r", type_context, artifacts)
    return artifacts


class Writer:
    """A class that handles writing the expanded module, based on the source of a Python module."""

    VALID_TYPING_IMPORTS = Literal["Protocol"]

    def __init__(
        self,
        source: str,
        module_path: str | pathlib.Path,
        runtime_module: str = DEFAULT_RUNTIME_MODULE,
    ):
        """Initialize the writer with a module source.

        Args:
            source (str): The source of the module to expand.
            module_path (str | pathlib.Path): The path of the module, used in diagnostics and the header.
            runtime_module (str): The module that provides the actor runtime.
        """
        self._source = source
        self._module_path = pathlib.Path(module_path)
        self._runtime_module = runtime_module

        self._typing_imports: set[Writer.VALID_TYPING_IMPORTS] = set()
        self._needs_runtime_import = False

        self.types: list[TypeDecl] = []
        self.artifact_sets: list[tuple[str, GeneratedArtifactSet]] = []

    @classmethod
    def from_file(cls, path: str | pathlib.Path, runtime_module: str = DEFAULT_RUNTIME_MODULE) -> Writer:
        """Create a writer for a module on disk."""
        with open(path, encoding="utf8") as f:
            return cls(f.read(), path, runtime_module)

    @property
    def display_name(self) -> str:
        """The base name of this writer's source module."""
        return self._module_path.name

    @property
    def diagnostics(self) -> list[Diagnostic]:
        """All diagnostics of all expanded types, in source order."""
        return [diagnostic for _, artifacts in self.artifact_sets for diagnostic in artifacts.diagnostics]

    @property
    def has_generated(self) -> bool:
        """Whether the module contains any decorated class."""
        return bool(self.artifact_sets)

    def _add_typing_import(self, name: Writer.VALID_TYPING_IMPORTS):
        """Add an import for a name from the 'typing' package."""
        self._typing_imports.add(name)

    @property
    def imports(self) -> list[str]:
        """Get the import lines needed by the generated section.

        Returns:
            list[str]: The import lines.
        """
        import_lines: list[str] = []

        if self._needs_runtime_import:
            import_lines.append(f"import {self._runtime_module}")

        if self._typing_imports:
            import_lines.append("from typing import " + ", ".join(sorted(self._typing_imports)))

        return import_lines

    def generate_type(self, type_decl: TypeDecl) -> GeneratedArtifactSet:
        """Run the generation pass for one decorated class.

        Args:
            type_decl (TypeDecl): The decorated class.

        Raises:
            PolicyError: If the decorator arguments are malformed.
            TraitNameError: If no trait name can be derived for the class.

        Returns:
            GeneratedArtifactSet: The generated declarations and diagnostics of the class.
        """
        policy = policy_from_decorator(type_decl.decorator)
        type_context = TypeContext.from_type_decl(type_decl)

        artifacts = expand_type_handlers(
            type_context,
            type_decl.methods,
            policy,
            runtime_module=self._runtime_module,
            lineno=type_decl.lineno,
        )

        if artifacts.runtime_symbols:
            self._needs_runtime_import = True
        for name in sorted(artifacts.typing_imports):
            self._add_typing_import(cast(Writer.VALID_TYPING_IMPORTS, name))

        for diagnostic in artifacts.diagnostics:
            logger.error(diagnostic.format(str(self._module_path)))

        logger.info(
            "Generated %d handler binding(s) for '%s' in '%s'.",
            len(artifacts.bindings),
            type_decl.qualified_name,
            self.display_name,
        )
        return artifacts

    def generate_all(self) -> None:
        """Parse the module and run the generation pass for every decorated class."""
        self.types = parse_module(self._source, str(self._module_path))

        for type_decl in self.types:
            self.artifact_sets.append((type_decl.qualified_name, self.generate_type(type_decl)))

    def dumps_generated(self) -> str:
        """Generates string output for the generated section only.

        Returns:
            str: The imports and declarations generated for all decorated classes.
        """
        out: list[str] = []
        out.extend(self.imports)

        for qualified_name, artifacts in self.artifact_sets:
            out.append("")
            out.append("")
            out.append(f"# Handlers of `{qualified_name}`.")
            out.append(artifacts.render())

        return "\n".join(out) + "\n"

    def dumps(self, generated: str | None = None) -> str:
        """Generates string output for the expanded module.

        The source module is kept verbatim and the generated section is appended after it.

        Args:
            generated (str | None, optional): A pre-rendered (e.g. formatted) generated section.
                Defaults to `dumps_generated()`.

        Returns:
            str: The output string.
        """
        if generated is None:
            generated = self.dumps_generated()

        source = self._source
        if not source.endswith("\n"):
            source += "\n"

        return f"{source}\n\n{GENERATED_SECTION_MARKER}\n{generated}"
