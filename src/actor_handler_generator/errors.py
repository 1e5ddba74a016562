"""Errors that abort a generation pass."""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for failures that stop generation for a whole source file."""


class SourceParseError(GenerationError):
    """Raised when a source file cannot be parsed."""


class PolicyError(GenerationError):
    """Raised when the decorator arguments of a class are malformed."""


class TraitNameError(GenerationError):
    """Raised when no client trait name can be derived for a type."""
