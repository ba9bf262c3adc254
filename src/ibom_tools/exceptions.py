"""
Custom exception hierarchy for ibom-tools.

Provides consistent error handling with context, suggestions, and actionable guidance.
All exceptions include:
- Context information (footprint reference, layer, shape kind, etc.)
- Suggestions for how to fix the issue
- Clear, formatted error messages

Example::

    from ibom_tools.exceptions import GeometryError, ValidationError

    # Raise with context and suggestions
    raise GeometryError(
        "Polygon needs at least 3 vertices",
        context={"shape": "Polygon", "vertices": 2},
        suggestions=["Check the zone outline"],
    )

    # Validation with multiple errors
    errors = ["Duplicate reference designator: R1", "Board outline is not set"]
    raise ValidationError(errors, context={"stage": "finalize"})
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class IbomError(Exception):
    """
    Base exception for all ibom-tools errors.

    Provides consistent formatting with context and suggestions.

    Attributes:
        context: Dictionary of contextual information (reference, layer, etc.)
        suggestions: List of actionable suggestions for fixing the error
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = [self.message]

        if self.context:
            parts.append("\n\nContext:")
            for key, value in self.context.items():
                parts.append(f"\n  {key}: {value}")

        if self.suggestions:
            parts.append("\n\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"\n  - {suggestion}")

        return "".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class ValidationError(IbomError):
    """
    Board validation failed with one or more errors.

    Collects all validation errors instead of failing on the first one,
    providing a complete list of issues to fix.

    Example::

        errors = [
            "Duplicate reference designator: R1",
            "Board outline is not set",
        ]
        raise ValidationError(errors, context={"stage": "finalize"})

    Attributes:
        errors: List of individual validation error messages
    """

    def __init__(
        self,
        errors: List[str],
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.errors = list(errors)
        message = f"Validation failed with {len(self.errors)} error(s):\n"
        message += "\n".join(f"  {i + 1}. {e}" for i, e in enumerate(self.errors))
        super().__init__(message, context, suggestions)


class GeometryError(ValidationError):
    """
    Degenerate or unsupported shape.

    Raised when a shape cannot be turned into a closed outline: zero size,
    zero radius, fewer than 3 polygon vertices, zero area, self-intersection.
    It is a ValidationError so callers catching bad input catch this too.

    Example::

        raise GeometryError(
            "Rect has zero size",
            context={"width_nm": 0, "height_nm": 1000000},
        )
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__([message], context, suggestions)
        self.message = message


class SerializationError(IbomError):
    """
    Internal invariant violated while producing the pcbdata document.

    Indicates a bug in the data model or geometry encoder: a finalized
    board should always serialize.

    Example::

        raise SerializationError(
            "BOM row references unknown footprint",
            context={"footprint_index": 7, "footprints": 3},
        )
    """

    pass


class AssetError(IbomError):
    """
    Web asset bundle missing, incomplete, or version-mismatched.

    Example::

        raise AssetError(
            "Asset bundle version does not match document",
            context={"bundle": "v2.9.0", "document": "v2.8.1"},
            suggestions=["Serialize with schema_version=bundle.version"],
        )
    """

    pass


class ConfigurationError(IbomError):
    """
    Configuration or settings error.

    Raised when a configuration file is unreadable or a value has the wrong type.

    Example::

        raise ConfigurationError(
            "Invalid value for encoder.epsilon_ratio",
            context={"value": "-1", "expected": "positive float"},
        )
    """

    pass


__all__ = [
    "IbomError",
    "ValidationError",
    "GeometryError",
    "SerializationError",
    "AssetError",
    "ConfigurationError",
]
