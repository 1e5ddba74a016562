"""Actors expanded with a custom trait name and recipient addressing."""

from __future__ import annotations

from actor_runtime import Context, Message

import actor_handler_generator as gen


class Ping(Message[int]):
    pass


class Pong(Message[int]):
    pass


@gen.actor_handler(trait_name="Pinger", use_recipient=True)
class PingActor:
    def ping(self, message: Ping, ctx: Context[PingActor]) -> int:
        return 1

    def pong(self, message: Pong, ctx: Context[PingActor]) -> int:
        return 2

    def reset(self, ctx: Context[PingActor]) -> None:
        pass


@gen.actor_handler(trait_name="Pinger", no_trait_decl=True)
class PingMock:
    def ping(self, message: Ping, ctx: Context[PingMock]) -> int:
        return 0
