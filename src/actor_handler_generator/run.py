"""Top-level module for handler generation."""

from __future__ import annotations

import argparse
import glob
import logging
import os.path
import subprocess
import tempfile
from pathlib import Path

from actor_handler_generator.errors import GenerationError
from actor_handler_generator.helper import output_module_name
from actor_handler_generator.runtime_types import DEFAULT_RUNTIME_MODULE
from actor_handler_generator.writer import GENERATED_SECTION_MARKER, Writer
from actor_handler_generator.writer_dto import Diagnostic

logger = logging.getLogger(__name__)

PY_SUFFIX = ".py"
DEFAULT_OUTPUT_SUFFIX = "_handlers"


class PyrightValidationError(GenerationError):
    """Raised when pyright validation finds type errors in generated modules; aborts the run."""

    pass


def validate_with_pyright(output_files: list[str]) -> None:
    """Validate generated modules using pyright.

    Args:
        output_files: The generated modules.

    Raises:
        PyrightValidationError: If pyright finds any type errors.
    """
    if not output_files:
        logger.warning("No generated modules found to validate")
        return

    logger.info(f"Validating {len(output_files)} generated module(s) with pyright...")

    try:
        result = subprocess.run(
            ["pyright", *output_files],
            capture_output=True,
            text=True,
            check=False,
        )

        error_count = result.stdout.count(" error:")

        if error_count > 0 or result.returncode != 0:
            error_msg = f"Pyright validation failed with {error_count} error(s):\n\n{result.stdout}"
            logger.error(error_msg)
            raise PyrightValidationError(error_msg)

        logger.info("Pyright validation passed - no type errors found")

    except FileNotFoundError as e:
        logger.error("pyright not found. Please install pyright: pip install pyright")
        raise PyrightValidationError("pyright command not found. Please install pyright.") from e
    except subprocess.SubprocessError as e:
        error_msg = f"Error running pyright: {e}"
        logger.error(error_msg)
        raise PyrightValidationError(error_msg) from e


def format_outputs(raw_input: str) -> str:
    """Formats raw generated code using ruff.

    Only the generated section is passed here; the user's source is never reformatted.

    Args:
        raw_input (str): The unformatted input.

    Returns:
        str: The formatted outputs, or the raw input if ruff is unavailable or fails.
    """
    try:
        with tempfile.NamedTemporaryFile(mode="w", suffix=PY_SUFFIX, delete=False, encoding="utf-8") as f:
            temp_path = Path(f.name)
            f.write(raw_input)

        try:
            # Import sorting only; the generated section is not linted otherwise.
            subprocess.run(
                ["ruff", "check", "--fix", "--select", "I", str(temp_path)],
                capture_output=True,
                check=False,
            )

            subprocess.run(
                ["ruff", "format", "--line-length", "120", str(temp_path)],
                capture_output=True,
                check=True,
            )

            return temp_path.read_text(encoding="utf-8")

        finally:
            temp_path.unlink(missing_ok=True)

    except subprocess.CalledProcessError as e:
        logger.error(f"Ruff formatting failed: {e}")
        logger.error(f"Stdout: {e.stdout.decode('utf-8', errors='replace')}")
        logger.error(f"Stderr: {e.stderr.decode('utf-8', errors='replace')}")
        return raw_input
    except FileNotFoundError:
        logger.warning("ruff not found, writing unformatted output.")
        return raw_input


def generate_module(
    source_path: str,
    output_file_path: str,
    runtime_module: str = DEFAULT_RUNTIME_MODULE,
    format_output: bool = True,
) -> list[Diagnostic] | None:
    """Entry-point for expanding one Python module.

    Args:
        source_path (str): The module to expand.
        output_file_path (str): The path of the expanded module.
        runtime_module (str): The module that provides the actor runtime.
        format_output (bool): Whether to format the generated section with ruff.

    Raises:
        GenerationError: If the module cannot be parsed or a class cannot be expanded.

    Returns:
        list[Diagnostic] | None: The diagnostics of the module, or None if it has no decorated class.
    """
    writer = Writer.from_file(source_path, runtime_module=runtime_module)
    writer.generate_all()

    if not writer.has_generated:
        logger.debug("No actor_handler classes in '%s', skipping.", source_path)
        return None

    generated = writer.dumps_generated()
    if format_output:
        generated = format_outputs(generated)

    os.makedirs(os.path.dirname(output_file_path) or ".", exist_ok=True)
    with open(output_file_path, "w", encoding="utf8") as output_file:
        output_file.write(writer.dumps(generated))

    logger.info("Wrote expanded module to '%s'.", output_file_path)

    return writer.diagnostics


def extract_base_from_pattern(pattern: str) -> str:
    """Extract the base directory from a glob pattern.

    The base is the directory that should be used as the root for preserving directory structure.
    - For patterns with wildcards, returns the directory before the first wildcard part
    - For specific file paths, returns the parent directory

    Args:
        pattern: A file path or glob pattern.

    Returns:
        The base directory path, or empty string if pattern starts with wildcard.
    """
    is_absolute = os.path.isabs(pattern)

    parts = pattern.split(os.sep)
    base_parts = []
    found_wildcard = False

    for part in parts:
        if "*" in part or "?" in part or "[" in part:
            found_wildcard = True
            break
        base_parts.append(part)

    if not base_parts:
        return ""

    if is_absolute:
        base = os.sep + os.path.join(*base_parts[1:]) if len(base_parts) > 1 else os.sep
    else:
        base = os.path.join(*base_parts) if len(base_parts) > 1 else base_parts[0]

    if not found_wildcard and os.path.splitext(pattern)[1] == PY_SUFFIX:
        base = os.path.dirname(base)

    return base


def _is_generated(path: str, output_suffix: str) -> bool:
    if path.endswith(f"{output_suffix}{PY_SUFFIX}"):
        return True

    with open(path, encoding="utf8") as f:
        return GENERATED_SECTION_MARKER in f.read()


def find_source_paths(paths: list[str], excludes: list[str], root_directory: str, recursive: bool) -> set[str]:
    """Resolve paths, directories and glob expressions into the set of Python modules to expand.

    Args:
        paths: Paths, directories or glob expressions relative to the root directory.
        excludes: Paths or glob expressions to leave out.
        root_directory: The directory, from which the generator is executed.
        recursive: Whether directories and `**` patterns are searched recursively.

    Returns:
        The matching module paths, except excluded ones.
    """
    excluded_paths: set[str] = set()
    for exclude in excludes:
        exclude_path = os.path.join(root_directory, exclude)
        if os.path.isfile(exclude_path):
            excluded_paths.add(exclude_path)
        else:
            excluded_paths = excluded_paths.union(glob.glob(exclude_path, recursive=recursive))

    search_paths: set[str] = set()
    for path in paths:
        search_path = os.path.join(root_directory, path)

        if recursive and os.path.isdir(search_path):
            for root, _, files in os.walk(search_path):
                for file in files:
                    if file.endswith(PY_SUFFIX):
                        search_paths.add(os.path.join(root, file))
        elif os.path.isdir(search_path):
            for file in os.listdir(search_path):
                file_path = os.path.join(search_path, file)
                if os.path.isfile(file_path) and file.endswith(PY_SUFFIX):
                    search_paths.add(file_path)
        else:
            search_paths = search_paths.union(
                p for p in glob.glob(search_path, recursive=recursive) if p.endswith(PY_SUFFIX)
            )

    return search_paths - excluded_paths


def _output_directory(path: str, output_dir: str, common_base: str | None) -> str:
    if not output_dir:
        return os.path.dirname(path)

    if common_base:
        rel_dir = os.path.dirname(os.path.relpath(os.path.abspath(path), common_base))
        return os.path.join(output_dir, rel_dir)

    return output_dir


def _common_base(paths: list[str], valid_paths: set[str], root_directory: str) -> str | None:
    bases = {extract_base_from_pattern(p) for p in paths}
    bases.discard("")

    if len(bases) == 1:
        base = os.path.abspath(os.path.join(root_directory, bases.pop()))
        if all(os.path.abspath(p).startswith(base + os.sep) for p in valid_paths):
            return base

    if not valid_paths:
        return None

    return os.path.commonpath([os.path.dirname(os.path.abspath(p)) for p in valid_paths])


def run(args: argparse.Namespace, root_directory: str) -> int:
    """Run the generator on a set of paths that point to Python modules.

    Uses `generate_module` on each input file.

    Args:
        args (argparse.Namespace): The arguments that were passed when calling the generator.
        root_directory (str): The directory, from which the generator is executed.

    Raises:
        GenerationError: If a module cannot be parsed or expanded.
        PyrightValidationError: If pyright validation was requested and failed.

    Returns:
        int: The number of diagnostics reported for all modules.
    """
    paths: list[str] = args.paths
    excludes: list[str] = args.excludes
    clean: list[str] = args.clean
    output_dir: str = getattr(args, "output_dir", "")
    output_suffix: str = getattr(args, "suffix", DEFAULT_OUTPUT_SUFFIX)
    runtime_module: str = getattr(args, "runtime_module", DEFAULT_RUNTIME_MODULE)
    format_output: bool = not getattr(args, "no_format", False)
    use_pyright: bool = getattr(args, "pyright", False)

    cleanup_paths: set[str] = set()
    for c in clean:
        cleanup_directory = os.path.join(root_directory, c)
        cleanup_paths = cleanup_paths.union(glob.glob(cleanup_directory, recursive=args.recursive))

    for cleanup_path in cleanup_paths:
        os.remove(cleanup_path)

    valid_paths = {
        path
        for path in find_source_paths(paths, excludes, root_directory, args.recursive)
        if not _is_generated(path, output_suffix)
    }

    common_base = _common_base(paths, valid_paths, root_directory) if output_dir else None

    written: list[str] = []
    diagnostic_count = 0

    for path in sorted(valid_paths):
        output_directory = _output_directory(path, output_dir, common_base)

        output_file_path = os.path.join(output_directory, output_module_name(os.path.basename(path), output_suffix))

        diagnostics = generate_module(path, output_file_path, runtime_module, format_output)
        if diagnostics is None:
            continue

        written.append(output_file_path)
        diagnostic_count += len(diagnostics)

    logger.info("Expanded %d of %d module(s).", len(written), len(valid_paths))

    if use_pyright:
        validate_with_pyright(written)

    return diagnostic_count
