"""Runtime marker for classes expanded by the generator."""

from __future__ import annotations

from typing import Any


def actor_handler(
    cls: type | None = None,
    /,
    *,
    trait_name: str | None = None,
    no_trait_decl: bool = False,
    no_trait_impl: bool = False,
    use_recipient: bool = False,
) -> Any:
    """Mark a class for handler generation.

    The decorator leaves the class untouched; the generator reads its arguments from the source.
    It can be used bare (`@actor_handler`) or with keyword options
    (`@actor_handler(trait_name="Greeter", use_recipient=True)`).
    """
    if cls is not None:
        return cls

    def mark(target: type) -> type:
        return target

    return mark
