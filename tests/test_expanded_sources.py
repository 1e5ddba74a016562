"""End to end tests on the expanded test sources."""

from __future__ import annotations

import ast
from pathlib import Path

from actor_handler_generator.writer import GENERATED_SECTION_MARKER

SOURCES_DIR = Path(__file__).parent / "sources"


def _generated_section(module: str) -> str:
    return module.split(GENERATED_SECTION_MARKER, 1)[1]


class TestGreeter:
    def test_source_is_preserved(self, greeter_module: str):
        source = (SOURCES_DIR / "greeter.py").read_text(encoding="utf8")

        assert greeter_module.startswith(source)

    def test_bindings(self, greeter_module: str):
        generated = _generated_section(greeter_module)

        assert "class GreeterGreetHandler(actor_runtime.Handler[Greeter, Greeting]):" in generated
        assert "    Result = str" in generated
        assert "class GreeterFarewellHandler(actor_runtime.Handler[Greeter, Farewell]):" in generated
        assert "    Result = actor_runtime.MessageResult[Farewell]" in generated
        assert "        return await actor.farewell(msg, ctx)" in generated

    def test_non_handlers_are_ignored(self, greeter_module: str):
        """The constructor and the static method are not handlers and are not diagnosed."""
        generated = _generated_section(greeter_module)

        assert "default_name" not in generated
        assert "__init__" not in generated
        assert "# error:" not in generated

    def test_client_trait(self, greeter_module: str):
        generated = _generated_section(greeter_module)

        assert "class GreeterAddr(Protocol):" in generated
        assert "    def greet(self, msg: Greeting) -> actor_runtime.Request[Greeter, Greeting]: ..." in generated
        assert "class GreeterAddrImpl(actor_runtime.Addr[Greeter], GreeterAddr):" in generated

    def test_is_valid_python(self, greeter_module: str):
        ast.parse(greeter_module)


class TestRecipient:
    def test_shared_trait_is_declared_once(self, recipient_module: str):
        """Only the first actor declares `Pinger`; the mock only implements it."""
        generated = _generated_section(recipient_module)

        assert generated.count("class Pinger(Protocol):") == 1
        assert "class PingActorAddrImpl(actor_runtime.Addr[PingActor], Pinger):" in generated
        assert "class PingMockAddrImpl(actor_runtime.Addr[PingMock], Pinger):" in generated

    def test_recipient_addressing(self, recipient_module: str):
        generated = _generated_section(recipient_module)

        assert "    def ping(self, msg: Ping) -> actor_runtime.RecipientRequest[Ping]: ..." in generated
        assert "        return self.recipient(Pong).send(msg)" in generated

    def test_rejected_handler(self, recipient_module: str):
        generated = _generated_section(recipient_module)

        assert "# error: Wrong arity for handler reset" in generated
        assert "PingActorResetHandler" not in generated
        assert "def reset(" not in generated

    def test_is_valid_python(self, recipient_module: str):
        ast.parse(recipient_module)


class TestNested:
    def test_generic_nested_actor(self, generated_dir: Path):
        module = (generated_dir / "nested" / "counter_handlers.py").read_text(encoding="utf8")
        generated = _generated_section(module)

        assert "# Handlers of `Counters.Counter`." in generated
        assert (
            "class CounterIncrementHandler(actor_runtime.Handler[Counters.Counter[T], Increment]):" in generated
        )
        assert "class CounterAddr(Protocol[T]):" in generated
        assert "CounterAddrImpl" not in generated
        ast.parse(module)


def test_plain_module_is_not_expanded(generated_dir: Path):
    assert not (generated_dir / "plain_handlers.py").exists()
