"""The generation policy of a decorated class."""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass

from actor_handler_generator.errors import PolicyError

logger = logging.getLogger(__name__)

_FLAG_KEYS = ("no_trait_decl", "no_trait_impl", "use_recipient")
_TRAIT_NAME_KEY = "trait_name"


@dataclass(frozen=True)
class GenerationPolicy:
    """Controls the naming and the emitted parts of the client trait.

    Attributes:
        trait_name: Overrides the default `<TypeName>Addr` trait name.
        no_trait_decl: Do not emit the trait declaration.
        no_trait_impl: Do not emit the trait implementation.
        use_recipient: Send through a recipient narrowed to the message type instead of the address.
    """

    trait_name: str | None = None
    no_trait_decl: bool = False
    no_trait_impl: bool = False
    use_recipient: bool = False

    @property
    def trait_name_override(self) -> str | None:
        return self.trait_name

    @property
    def suppress_trait_declaration(self) -> bool:
        return self.no_trait_decl

    @property
    def suppress_trait_implementation(self) -> bool:
        return self.no_trait_impl

    @property
    def use_indirect_addressing(self) -> bool:
        return self.use_recipient


def policy_from_decorator(decorator: ast.expr | None) -> GenerationPolicy:
    """Read the generation policy from the keyword arguments of an `actor_handler` decorator.

    A bare `@actor_handler` yields the default policy. Unknown keywords are ignored.

    Args:
        decorator (ast.expr | None): The decorator node.

    Raises:
        PolicyError: If the decorator has positional arguments or a value is not a literal of the expected type.

    Returns:
        GenerationPolicy: The policy for the decorated class.
    """
    if not isinstance(decorator, ast.Call):
        return GenerationPolicy()

    if decorator.args:
        raise PolicyError(f"line {decorator.lineno}: actor_handler only accepts keyword arguments")

    values: dict[str, str | bool] = {}
    for keyword in decorator.keywords:
        key = keyword.arg

        if key is None:
            raise PolicyError(f"line {decorator.lineno}: actor_handler does not accept **kwargs")

        if key == _TRAIT_NAME_KEY:
            values[key] = _literal(keyword.value, str, key)
        elif key in _FLAG_KEYS:
            values[key] = _literal(keyword.value, bool, key)
        else:
            logger.warning("Ignoring unknown actor_handler option '%s' on line %d.", key, decorator.lineno)

    return GenerationPolicy(**values)  # pyright: ignore[reportArgumentType]


def _literal(node: ast.expr, expected: type[str] | type[bool], key: str) -> str | bool:
    # Exact type check so that `trait_name=1` or `use_recipient=1` are rejected.
    if isinstance(node, ast.Constant) and type(node.value) is expected:
        return node.value
    raise PolicyError(
        f"line {node.lineno}: actor_handler option '{key}' expects a {expected.__name__} literal, "
        f"got '{ast.unparse(node)}'"
    )
