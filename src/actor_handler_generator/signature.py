"""Validation of handler method signatures and extraction of handler descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import override

from actor_handler_generator.declarations import KeywordOnlyParam, MethodDecl, TypedParam, TypeRef, VariadicParam
from actor_handler_generator.runtime_types import HANDLER_ARITY, RuntimeSymbol


@dataclass(frozen=True)
class DeferredResult:
    """The result type that the message type declares for itself.

    The generator has no view of the message declaration, so the result is left for the runtime
    to resolve through `MessageResult[<message type>]`.
    """

    message_type: TypeRef

    @override
    def __str__(self) -> str:
        return f"{RuntimeSymbol.MESSAGE_RESULT}[{self.message_type}]"


ResultType = TypeRef | DeferredResult


@dataclass(frozen=True)
class HandlerDescriptor:
    """A validated handler method.

    Attributes:
        method_name: The name of the handler method on the actor class.
        message_type: The annotation of the message parameter.
        result_type: The declared return annotation, or a deferred reference to the message's result.
        is_async: Whether the handler is a coroutine function.
    """

    method_name: str
    message_type: TypeRef
    result_type: ResultType
    is_async: bool = False

    @property
    def has_deferred_result(self) -> bool:
        """Whether the result type is resolved by the runtime."""
        return isinstance(self.result_type, DeferredResult)


class SignatureErrorKind(Enum):
    """Reasons for rejecting a handler method."""

    WRONG_ARITY = "wrong_arity"
    UNEXPECTED_ARGUMENT_SHAPE = "unexpected_argument_shape"


@dataclass(frozen=True)
class SignatureValidationError:
    """A rejected handler method, returned as a value so sibling methods keep generating."""

    kind: SignatureErrorKind
    method_name: str

    @property
    def message(self) -> str:
        """A human readable description of the failure."""
        if self.kind is SignatureErrorKind.WRONG_ARITY:
            return f"Wrong arity for handler {self.method_name}"
        return f"Unexpected argument types for handler {self.method_name}"

    @override
    def __str__(self) -> str:
        return self.message


def parse_handler_descriptor(method: MethodDecl) -> HandlerDescriptor | SignatureValidationError:
    """Validate one method and extract its handler descriptor.

    The method must declare exactly three parameters: the receiver, the message and the context.
    The message parameter must be a plain name with an explicit annotation; that annotation is the
    message type. The context must be passable by position. Arity is checked before the parameter
    shape.

    Args:
        method (MethodDecl): The method to validate.

    Returns:
        HandlerDescriptor | SignatureValidationError: The descriptor, or the reason the method was rejected.
    """
    if method.arity != HANDLER_ARITY:
        return SignatureValidationError(SignatureErrorKind.WRONG_ARITY, method.name)

    message_param = method.params[1]
    if not isinstance(message_param, TypedParam):
        return SignatureValidationError(SignatureErrorKind.UNEXPECTED_ARGUMENT_SHAPE, method.name)

    # The binding passes the context positionally.
    context_param = method.params[2]
    if isinstance(context_param, KeywordOnlyParam) or (
        isinstance(context_param, VariadicParam) and context_param.kind == "**"
    ):
        return SignatureValidationError(SignatureErrorKind.UNEXPECTED_ARGUMENT_SHAPE, method.name)

    message_type = message_param.annotation

    result_type: ResultType
    if method.returns is None:
        result_type = DeferredResult(message_type)
    else:
        result_type = method.returns

    return HandlerDescriptor(
        method_name=method.name,
        message_type=message_type,
        result_type=result_type,
        is_async=method.is_async,
    )
