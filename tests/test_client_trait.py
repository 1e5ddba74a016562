"""Tests for client trait generation."""

from __future__ import annotations

import ast

import pytest

from actor_handler_generator.client import expand_client_trait, implementation_name, resolve_trait_name
from actor_handler_generator.declarations import TypeRef
from actor_handler_generator.errors import TraitNameError
from actor_handler_generator.policy import GenerationPolicy
from actor_handler_generator.signature import DeferredResult, HandlerDescriptor, parse_handler_descriptor
from actor_handler_generator.writer_dto import ArtifactKind, TraitName, TypeContext
from tests.helpers import parse_single_method

RUNTIME = "actor_runtime"

EXAMPLE = TypeContext.from_expression("Example")

DESCRIPTORS = [
    HandlerDescriptor("greet", TypeRef("Greeting"), TypeRef("Hello")),
    HandlerDescriptor("say_hello", TypeRef("Hello"), DeferredResult(TypeRef("Hello"))),
]


class TestResolveTraitName:
    """Trait names come from the override or the type's terminal name."""

    def test_default_name(self):
        """The type name is suffixed with Addr."""
        assert resolve_trait_name(EXAMPLE) == TraitName("ExampleAddr")

    def test_override(self):
        """The override replaces the default."""
        assert resolve_trait_name(EXAMPLE, "Greeter") == TraitName("Greeter")

    def test_qualified_prefix_is_dropped(self):
        """Only the terminal path segment is used."""
        assert resolve_trait_name(TypeContext.from_expression("app.models.Example")).name == "ExampleAddr"

    def test_type_arguments_are_kept(self):
        """Type arguments of the owning type carry over to the trait."""
        context = TypeContext.from_expression("Store[K, V]")

        assert resolve_trait_name(context).reference == "StoreAddr[K, V]"
        assert resolve_trait_name(context, "Storage").reference == "Storage[K, V]"

    @pytest.mark.parametrize("expression", ["Example | None", "tuple[int, str][0]", "'Example'"])
    def test_non_nameable_type_requires_override(self, expression: str):
        """No name is guessed for types that are not nameable paths."""
        context = TypeContext.from_expression(expression)

        with pytest.raises(TraitNameError):
            resolve_trait_name(context)

        assert resolve_trait_name(context, "Custom").name == "Custom"

    def test_implementation_name(self):
        """Implementations are named after the owning type."""
        assert implementation_name(EXAMPLE, TraitName("Greeter")) == "ExampleAddrImpl"
        assert implementation_name(TypeContext.from_expression("Example | None"), TraitName("Custom")) == "CustomImpl"


class TestDefaultPolicy:
    """Direct addressing with both trait parts."""

    def test_trait_has_one_method_per_handler(self):
        """The declaration lists every handler under the default trait name."""
        declaration, _ = expand_client_trait(EXAMPLE, DESCRIPTORS, GenerationPolicy(), RUNTIME)

        assert declaration is not None
        assert declaration.kind is ArtifactKind.TRAIT_DECLARATION
        assert declaration.lines == (
            "class ExampleAddr(Protocol):",
            "    def greet(self, msg: Greeting) -> actor_runtime.Request[Example, Greeting]: ...",
            "",
            "    def say_hello(self, msg: Hello) -> actor_runtime.Request[Example, Hello]: ...",
        )

    def test_implementation_sends_directly(self):
        """The implementation sends on the address itself."""
        _, implementation = expand_client_trait(EXAMPLE, DESCRIPTORS, GenerationPolicy(), RUNTIME)

        assert implementation is not None
        assert implementation.kind is ArtifactKind.TRAIT_IMPLEMENTATION
        assert implementation.lines == (
            "class ExampleAddrImpl(actor_runtime.Addr[Example], ExampleAddr):",
            "    def greet(self, msg: Greeting) -> actor_runtime.Request[Example, Greeting]:",
            "        return self.send(msg)",
            "",
            "    def say_hello(self, msg: Hello) -> actor_runtime.Request[Example, Hello]:",
            "        return self.send(msg)",
        )

    def test_no_handlers(self):
        """Types without valid handlers still get an empty trait."""
        declaration, implementation = expand_client_trait(EXAMPLE, [], GenerationPolicy(), RUNTIME)

        assert declaration is not None and implementation is not None
        assert declaration.lines == ("class ExampleAddr(Protocol):", "    pass")
        assert implementation.lines == ("class ExampleAddrImpl(actor_runtime.Addr[Example], ExampleAddr):", "    pass")


class TestRecipientPolicy:
    """Indirect addressing narrows the address to a recipient."""

    def test_renamed_trait_returns_recipient_requests(self):
        """Every trait method returns a RecipientRequest over its message."""
        policy = GenerationPolicy(trait_name="Greeter", use_recipient=True)

        declaration, implementation = expand_client_trait(EXAMPLE, DESCRIPTORS, policy, RUNTIME)

        assert declaration is not None and implementation is not None
        assert declaration.lines[0] == "class Greeter(Protocol):"
        assert declaration.lines[1] == "    def greet(self, msg: Greeting) -> actor_runtime.RecipientRequest[Greeting]: ..."
        assert implementation.lines[0] == "class ExampleAddrImpl(actor_runtime.Addr[Example], Greeter):"

        bodies = [line.strip() for line in implementation.lines if line.strip().startswith("return")]
        assert bodies == [
            "return self.recipient(Greeting).send(msg)",
            "return self.recipient(Hello).send(msg)",
        ]
        assert "return self.send(msg)" not in implementation.render()


class TestSuppression:
    """Declaration and implementation are suppressed independently."""

    def test_implementation_only(self):
        """Without a declaration the implementation targets the external trait name."""
        policy = GenerationPolicy(trait_name="Greeter", no_trait_decl=True)

        declaration, implementation = expand_client_trait(EXAMPLE, DESCRIPTORS, policy, RUNTIME)

        assert declaration is None
        assert implementation is not None
        assert implementation.lines[0] == "class ExampleAddrImpl(actor_runtime.Addr[Example], Greeter):"

    def test_declaration_only(self):
        """Without an implementation only the protocol is emitted."""
        declaration, implementation = expand_client_trait(
            EXAMPLE, DESCRIPTORS, GenerationPolicy(no_trait_impl=True), RUNTIME
        )

        assert declaration is not None
        assert implementation is None

    def test_both_suppressed(self):
        """Suppressing both parts emits nothing."""
        policy = GenerationPolicy(no_trait_decl=True, no_trait_impl=True)

        assert expand_client_trait(EXAMPLE, DESCRIPTORS, policy, RUNTIME) == (None, None)


class TestGenericTypes:
    """Generic owners produce generic protocols."""

    def test_generic_trait(self):
        """The protocol is parameterized and the implementation refers to it with arguments."""
        context = TypeContext.from_expression("Store[T]")

        declaration, implementation = expand_client_trait(context, DESCRIPTORS[:1], GenerationPolicy(), RUNTIME)

        assert declaration is not None and implementation is not None
        assert declaration.lines[0] == "class StoreAddr(Protocol[T]):"
        assert implementation.lines[0] == "class StoreAddrImpl(actor_runtime.Addr[Store[T]], StoreAddr[T]):"
        ast.parse(declaration.render() + "\n" + implementation.render())


class TestForwardReferences:
    """Quoted annotations are written as plain type expressions."""

    def test_recipient_is_narrowed_to_the_message_class(self):
        """The recipient is keyed by the message class, not by a string."""
        method = parse_single_method("def greet(self, message: 'Greeting', ctx: Ctx) -> 'Hello': pass")
        descriptor = parse_handler_descriptor(method)
        assert isinstance(descriptor, HandlerDescriptor)

        declaration, implementation = expand_client_trait(
            EXAMPLE, [descriptor], GenerationPolicy(use_recipient=True), RUNTIME
        )

        assert declaration is not None and implementation is not None
        assert "    def greet(self, msg: Greeting) -> actor_runtime.RecipientRequest[Greeting]: ..." in declaration.lines
        assert "        return self.recipient(Greeting).send(msg)" in implementation.lines
        assert "'Greeting'" not in declaration.render() + implementation.render()
