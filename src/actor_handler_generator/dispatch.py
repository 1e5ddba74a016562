"""Generation of dispatch bindings that route a message type to a handler method."""

from __future__ import annotations

from actor_handler_generator import helper
from actor_handler_generator.runtime_types import HANDLER_SUFFIX, RuntimeSymbol
from actor_handler_generator.signature import HandlerDescriptor
from actor_handler_generator.writer_dto import ArtifactKind, GeneratedArtifact, TypeContext


def binding_name(type_context: TypeContext, descriptor: HandlerDescriptor) -> str:
    """The class name of the binding, e.g. `ExampleSayHelloHandler` for `Example.say_hello`."""
    return f"{type_context.binding_prefix}{helper.to_camel_case(descriptor.method_name)}{HANDLER_SUFFIX}"


def render_result_type(descriptor: HandlerDescriptor, runtime_module: str) -> str:
    """Render the result type, qualifying a deferred result with the runtime module."""
    if descriptor.has_deferred_result:
        return f"{runtime_module}.{descriptor.result_type}"
    return str(descriptor.result_type)


def expand_dispatch_binding(
    type_context: TypeContext,
    descriptor: HandlerDescriptor,
    runtime_module: str,
) -> GeneratedArtifact:
    """Generate the binding that lets the runtime dispatch one message type to its handler method.

    The binding declares that the owning type handles the message type, fixes the associated
    `Result`, and delegates `handle` to the handler method with the message and the context
    unchanged. The descriptor is expected to be valid.

    Example output:

        class ExampleGreetHandler(actor_runtime.Handler[Example, Greeting]):
            Result = Hello

            @staticmethod
            def handle(actor: Example, msg: Greeting, ctx: actor_runtime.Context[Example]) -> Hello:
                return actor.greet(msg, ctx)

    Args:
        type_context (TypeContext): The owning type.
        descriptor (HandlerDescriptor): The validated handler.
        runtime_module (str): The module that provides the actor runtime.

    Returns:
        GeneratedArtifact: The binding declaration.
    """
    actor_type = type_context.type_expression
    message_type = str(descriptor.message_type)
    result_type = render_result_type(descriptor, runtime_module)

    handler_base = helper.new_group(f"{runtime_module}.{RuntimeSymbol.HANDLER}", [actor_type, message_type])
    context_type = helper.new_group(f"{runtime_module}.{RuntimeSymbol.CONTEXT}", [actor_type])

    call = f"actor.{descriptor.method_name}(msg, ctx)"
    if descriptor.is_async:
        call = f"await {call}"

    handle = helper.new_function(
        "handle",
        [f"actor: {actor_type}", f"msg: {message_type}", f"ctx: {context_type}"],
        return_type=result_type,
        body=[f"return {call}"],
        is_async=descriptor.is_async,
    )

    body = [f"Result = {result_type}", "", "@staticmethod", *handle]

    symbols = {RuntimeSymbol.HANDLER, RuntimeSymbol.CONTEXT}
    if descriptor.has_deferred_result:
        symbols.add(RuntimeSymbol.MESSAGE_RESULT)

    name = binding_name(type_context, descriptor)
    return GeneratedArtifact(
        kind=ArtifactKind.DISPATCH_BINDING,
        name=name,
        lines=tuple(helper.new_class(name, [handler_base], body)),
        runtime_symbols=frozenset(symbols),
    )
