"""Generate handler bindings and client traits for actor classes."""

from actor_handler_generator.markers import actor_handler

__all__ = ["actor_handler"]
