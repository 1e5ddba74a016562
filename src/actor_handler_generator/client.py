"""Generation of the client trait: a protocol with one send method per handler, and its implementation."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from actor_handler_generator import helper
from actor_handler_generator.errors import TraitNameError
from actor_handler_generator.policy import GenerationPolicy
from actor_handler_generator.runtime_types import ADDR_SUFFIX, IMPL_SUFFIX, RuntimeSymbol
from actor_handler_generator.signature import HandlerDescriptor
from actor_handler_generator.writer_dto import ArtifactKind, GeneratedArtifact, TraitName, TypeContext

logger = logging.getLogger(__name__)


def resolve_trait_name(type_context: TypeContext, trait_name: str | None = None) -> TraitName:
    """Resolve the name of the client trait for a type.

    The override wins if given, otherwise the terminal name of the type is suffixed with `Addr`.
    Qualified prefixes are dropped and type arguments are kept, so `models.Example[T]` yields
    `ExampleAddr[T]`.

    Args:
        type_context (TypeContext): The owning type.
        trait_name (str | None, optional): The name override from the policy. Defaults to None.

    Raises:
        TraitNameError: If the type is not a nameable path and no override was given.

    Returns:
        TraitName: The resolved trait name.
    """
    if trait_name is not None:
        return TraitName(trait_name, type_context.type_args)

    if type_context.terminal_name is None:
        raise TraitNameError(
            f"Cannot derive a trait name from '{type_context.type_expression}'; pass trait_name explicitly"
        )

    return TraitName(f"{type_context.terminal_name}{ADDR_SUFFIX}", type_context.type_args)


def implementation_name(type_context: TypeContext, trait: TraitName) -> str:
    """The class name of the trait implementation, e.g. `ExampleAddrImpl`.

    The name follows the owning type so that several types can implement one shared trait.
    """
    if type_context.terminal_name is not None:
        return f"{type_context.terminal_name}{ADDR_SUFFIX}{IMPL_SUFFIX}"
    return f"{trait.name}{IMPL_SUFFIX}"


def _request_type(
    type_context: TypeContext, descriptor: HandlerDescriptor, policy: GenerationPolicy, runtime_module: str
) -> str:
    message_type = str(descriptor.message_type)
    if policy.use_recipient:
        return helper.new_group(f"{runtime_module}.{RuntimeSymbol.RECIPIENT_REQUEST}", [message_type])
    return helper.new_group(f"{runtime_module}.{RuntimeSymbol.REQUEST}", [type_context.type_expression, message_type])


def _request_symbol(policy: GenerationPolicy) -> str:
    return RuntimeSymbol.RECIPIENT_REQUEST if policy.use_recipient else RuntimeSymbol.REQUEST


def _join_methods(methods: Sequence[list[str]]) -> list[str]:
    lines: list[str] = []
    for method in methods:
        if lines:
            lines.append("")
        lines.extend(method)
    return lines


def expand_trait_declaration(
    type_context: TypeContext,
    trait: TraitName,
    descriptors: Sequence[HandlerDescriptor],
    policy: GenerationPolicy,
    runtime_module: str,
) -> GeneratedArtifact:
    """Generate the trait declaration as a `Protocol` with one stub per handler.

    Each method takes the message and returns the pending request handle: a `RecipientRequest`
    over the message type with indirect addressing, or a `Request` over the owning type and the
    message type otherwise.

    Args:
        type_context (TypeContext): The owning type.
        trait (TraitName): The resolved trait name.
        descriptors (Sequence[HandlerDescriptor]): The valid handlers in source order.
        policy (GenerationPolicy): The generation policy.
        runtime_module (str): The module that provides the actor runtime.

    Returns:
        GeneratedArtifact: The trait declaration.
    """
    base = helper.new_group("Protocol", [trait.type_args]) if trait.type_args else "Protocol"

    methods = [
        helper.new_function(
            descriptor.method_name,
            ["self", f"msg: {descriptor.message_type}"],
            return_type=_request_type(type_context, descriptor, policy, runtime_module),
        )
        for descriptor in descriptors
    ]

    return GeneratedArtifact(
        kind=ArtifactKind.TRAIT_DECLARATION,
        name=trait.name,
        lines=tuple(helper.new_class(trait.name, [base], _join_methods(methods))),
        runtime_symbols=frozenset({_request_symbol(policy)}) if descriptors else frozenset(),
        typing_imports=frozenset({"Protocol"}),
    )


def expand_trait_implementation(
    type_context: TypeContext,
    trait: TraitName,
    descriptors: Sequence[HandlerDescriptor],
    policy: GenerationPolicy,
    runtime_module: str,
) -> GeneratedArtifact:
    """Generate the implementation of the trait for an address of the owning type.

    The implementation subclasses `Addr[<type>]` and the trait. With indirect addressing each
    method narrows the address to a recipient of the message type before sending; otherwise it
    sends on the address directly. The trait may be declared elsewhere.

    Args:
        type_context (TypeContext): The owning type.
        trait (TraitName): The resolved trait name.
        descriptors (Sequence[HandlerDescriptor]): The valid handlers in source order.
        policy (GenerationPolicy): The generation policy.
        runtime_module (str): The module that provides the actor runtime.

    Returns:
        GeneratedArtifact: The trait implementation.
    """
    addr_base = helper.new_group(f"{runtime_module}.{RuntimeSymbol.ADDR}", [type_context.type_expression])

    methods = []
    for descriptor in descriptors:
        if policy.use_recipient:
            send = f"return self.recipient({descriptor.message_type}).send(msg)"
        else:
            send = "return self.send(msg)"

        methods.append(
            helper.new_function(
                descriptor.method_name,
                ["self", f"msg: {descriptor.message_type}"],
                return_type=_request_type(type_context, descriptor, policy, runtime_module),
                body=[send],
            )
        )

    symbols = {RuntimeSymbol.ADDR}
    if descriptors:
        symbols.add(_request_symbol(policy))

    name = implementation_name(type_context, trait)
    return GeneratedArtifact(
        kind=ArtifactKind.TRAIT_IMPLEMENTATION,
        name=name,
        lines=tuple(helper.new_class(name, [addr_base, trait.reference], _join_methods(methods))),
        runtime_symbols=frozenset(symbols),
    )


def expand_client_trait(
    type_context: TypeContext,
    descriptors: Sequence[HandlerDescriptor],
    policy: GenerationPolicy,
    runtime_module: str,
) -> tuple[GeneratedArtifact | None, GeneratedArtifact | None]:
    """Generate the client trait declaration and implementation for a type.

    The name is resolved once for both parts. The two suppression flags of the policy are
    independent: an implementation can target a trait declared elsewhere, and a declaration can be
    emitted for a hand-written implementation.

    Args:
        type_context (TypeContext): The owning type.
        descriptors (Sequence[HandlerDescriptor]): The valid handlers in source order.
        policy (GenerationPolicy): The generation policy.
        runtime_module (str): The module that provides the actor runtime.

    Raises:
        TraitNameError: If no trait name can be derived.

    Returns:
        tuple[GeneratedArtifact | None, GeneratedArtifact | None]: The declaration and the implementation,
            each None when suppressed.
    """
    trait = resolve_trait_name(type_context, policy.trait_name)
    logger.debug("Client trait for '%s' is '%s'.", type_context, trait)

    declaration = None
    if not policy.no_trait_decl:
        declaration = expand_trait_declaration(type_context, trait, descriptors, policy, runtime_module)

    implementation = None
    if not policy.no_trait_impl:
        implementation = expand_trait_implementation(type_context, trait, descriptors, policy, runtime_module)

    return declaration, implementation
