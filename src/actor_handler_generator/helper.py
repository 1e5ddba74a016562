"""Helper functionality that is used in other modules of this package."""

from __future__ import annotations

import keyword
import re
from collections.abc import Sequence

INDENT = "    "

_NON_IDENTIFIER = re.compile(r"\W+")


def sanitize_name(name: str) -> str:
    """Sanitize a name to avoid Python keywords.

    If the name is a Python keyword, append an underscore.
    E.g. 'lambda' becomes 'lambda_', 'class' becomes 'class_'.

    Args:
        name (str): The original name.

    Returns:
        str: The sanitized name.
    """
    if keyword.iskeyword(name):
        return f"{name}_"
    return name


def to_identifier(text: str) -> str:
    """Collapse arbitrary text into a valid identifier.

    E.g. `Example[int] | None` becomes `Example_int_None`.

    Args:
        text (str): The text to collapse.

    Returns:
        str: An identifier made of the word characters of the text.
    """
    identifier = _NON_IDENTIFIER.sub("_", text).strip("_")
    if not identifier or identifier[0].isdigit():
        identifier = f"_{identifier}"
    return sanitize_name(identifier)


def to_camel_case(name: str) -> str:
    """Converts a snake_case method name to CamelCase.

    Examples:
        >>> to_camel_case("say_hello")
        'SayHello'
        >>> to_camel_case("_private_greet")
        'PrivateGreet'
        >>> to_camel_case("greetV2")
        'GreetV2'
    """
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def output_module_name(source_name: str, suffix: str) -> str:
    """Replaces the .py suffix of a source file name with the generated module suffix.

    Hyphens are converted to underscores to create valid Python module names.
    For example, `some-actor.py` becomes `some_actor_handlers.py` for the suffix `_handlers`.

    Args:
        source_name (str): The file name of the source module.
        suffix (str): The suffix appended to the module stem.

    Returns:
        str: The file name of the generated module.
    """
    stem = source_name[:-3] if source_name.endswith(".py") else source_name
    return f"{stem.replace('-', '_')}{suffix}.py"


def join_parameters(parameters: Sequence[str] | None) -> str:
    """Joins parameters by means of ', '.

    Args:
        parameters (Sequence[str] | None): The parameters to join.

    Returns:
        str: The joined parameters.
    """
    if parameters:
        return ", ".join(str(p) for p in parameters if p)

    else:
        return ""


def new_group(name: str, members: Sequence[str]) -> str:
    """Create a string for a group name and its members.

    For example, when the group name is 'Request', and the members are 'Example', and 'Greeting',
    the output will be 'Request[Example, Greeting]'.

    Args:
        name (str): The name of the group.
        members (Sequence[str]): The members of the group

    Returns:
        str: The resulting group string.
    """
    return f"{name}[{join_parameters(members)}]"


def new_function(
    name: str,
    parameters: Sequence[str] | None = None,
    return_type: str | None = None,
    body: Sequence[str] | None = None,
    is_async: bool = False,
) -> list[str]:
    """Create the lines of a function.

    Without a body, the function is a stub whose body is `...`.

    Args:
        name (str): The function name.
        parameters (Sequence[str] | None, optional): The function parameters, if any. Defaults to None.
        return_type (str | None, optional): The function's return type. Defaults to None.
        body (Sequence[str] | None, optional): The statements of the function body. Defaults to None.
        is_async (bool, optional): Whether to declare an `async def`. Defaults to False.

    Returns:
        list[str]: The function lines, not indented.
    """
    if return_type is None:
        return_type = "None"

    prefix = "async def" if is_async else "def"
    signature = f"{prefix} {name}({join_parameters(parameters)}) -> {return_type}:"

    if not body:
        return [f"{signature} ..."]

    return [signature, *indent(body)]


def new_class_declaration(name: str, parameters: Sequence[str] | None = None) -> str:
    """Creates a string for declaring a class.

    For example, for a name of 'SomeClass' and a list of parameters that is 'Protocol', the output
    will be 'class SomeClass(Protocol):'.

    If no parameters are provided, the output is just 'class SomeClass:'.

    Args:
        name (str): The class name.
        parameters (Sequence[str] | None, optional):
            A list of parameters that are part of the class declaration. Defaults to None.

    Returns:
        str: The class declaration.
    """
    if parameters:
        return f"class {name}({join_parameters(parameters)}):"
    else:
        return f"class {name}:"


def new_class(name: str, parameters: Sequence[str] | None, body: Sequence[str]) -> list[str]:
    """Create the lines of a class with an indented body.

    An empty body becomes `pass`.
    """
    return [new_class_declaration(name, parameters), *indent(body or ["pass"])]


def indent(lines: Sequence[str], depth: int = 1) -> list[str]:
    """Indent every non-empty line by `depth` levels."""
    return [f"{INDENT * depth}{line}" if line else "" for line in lines]
