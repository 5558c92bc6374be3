#!/usr/bin/env python3
"""
Error Taxonomy for Recipe Report Generation
Exception hierarchy for ingredient aggregation, reference resolution,
recipe parsing and template rendering, plus chained error formatting.
"""

from typing import Dict, List, Optional, Any, Sequence
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    VALIDATION = "validation"
    PARSING = "parsing"
    RESOLUTION = "resolution"
    SCALING = "scaling"
    TEMPLATE = "template"
    CONFIGURATION = "configuration"


class ReportError(Exception):
    """Base exception for report generation errors."""

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None,
                 severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                 category: ErrorCategory = ErrorCategory.VALIDATION):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.severity = severity
        self.category = category
        self.timestamp = datetime.now(timezone.utc)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }


class AggregationError(ReportError):
    """Error raised while aggregating an ingredient list."""
    pass


class RecipeNotFoundError(AggregationError):
    """A referenced recipe file could not be located under any base path."""

    def __init__(self, reference: str, search_paths: Sequence[str] = (), **kwargs):
        searched = ", ".join(str(p) for p in search_paths) or "<none>"
        super().__init__(
            f"Recipe '{reference}' not found (searched: {searched})",
            details={"reference": reference, "search_paths": [str(p) for p in search_paths]},
            category=ErrorCategory.RESOLUTION,
            **kwargs
        )
        self.reference = reference
        self.search_paths = list(search_paths)


class RecipeParseFailure(AggregationError):
    """A referenced recipe failed to parse; carries every error and warning."""

    def __init__(self, reference: str, errors: List[str], warnings: List[str] = None, **kwargs):
        lines = [f"Failed to parse recipe '{reference}':"]
        lines.extend(f"  - {error}" for error in errors)
        super().__init__(
            "\n".join(lines),
            details={"reference": reference, "errors": list(errors), "warnings": list(warnings or [])},
            category=ErrorCategory.PARSING,
            **kwargs
        )
        self.reference = reference
        self.errors = list(errors)
        self.warnings = list(warnings or [])


class MissingScalingMetadataError(AggregationError):
    """A servings or yield target was requested but the recipe does not declare it."""

    def __init__(self, recipe_name: str, field: str, requested: str = None, reason: str = None, **kwargs):
        message = f"Recipe '{recipe_name}' has no usable '{field}' metadata"
        if requested:
            message += f" (requested {requested})"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            details={"recipe": recipe_name, "field": field, "requested": requested},
            category=ErrorCategory.SCALING,
            **kwargs
        )
        self.recipe_name = recipe_name
        self.field = field
        self.requested = requested


class UnitMismatchError(AggregationError):
    """A yield-based reference asked for a unit the recipe does not yield."""

    def __init__(self, recipe_name: str, requested: str, requested_unit: str, yield_unit: Optional[str], **kwargs):
        super().__init__(
            f"Recipe '{recipe_name}' yields '{yield_unit or ''}' but {requested} was requested "
            f"(unit '{requested_unit}' does not match '{yield_unit or ''}')",
            details={
                "recipe": recipe_name,
                "requested": requested,
                "requested_unit": requested_unit,
                "yield_unit": yield_unit,
            },
            category=ErrorCategory.SCALING,
            **kwargs
        )
        self.recipe_name = recipe_name
        self.requested_unit = requested_unit
        self.yield_unit = yield_unit


class CircularDependencyError(AggregationError):
    """A reference was encountered while it was already being resolved."""

    def __init__(self, chain: Sequence[str], **kwargs):
        super().__init__(
            "Circular dependency found: " + " -> ".join(chain),
            details={"chain": list(chain)},
            category=ErrorCategory.RESOLUTION,
            severity=ErrorSeverity.HIGH,
            **kwargs
        )
        self.chain = list(chain)


class MalformedIngredientError(AggregationError):
    """An ingredient violates a structural precondition."""

    def __init__(self, message: str, ingredient: Any = None, **kwargs):
        super().__init__(message, details={"ingredient": repr(ingredient)}, **kwargs)
        self.ingredient = ingredient


class ReferenceResolutionError(AggregationError):
    """Wraps a failure raised while expanding one reference."""

    def __init__(self, recipe_name: str, reference: str, cause: ReportError, **kwargs):
        super().__init__(
            f"Failed to resolve reference '{reference}' in recipe '{recipe_name}': {cause.message}",
            details={"recipe": recipe_name, "reference": reference, "cause": cause.error_code},
            category=cause.category,
            severity=cause.severity,
            **kwargs
        )
        self.recipe_name = recipe_name
        self.reference = reference
        self.cause = cause

    @property
    def root_cause(self) -> ReportError:
        """Innermost engine error behind this chain of wrapped references."""
        cause = self.cause
        while isinstance(cause, ReferenceResolutionError):
            cause = cause.cause
        return cause


class RecipeParseError(ReportError):
    """The top-level recipe could not be parsed."""

    def __init__(self, errors: List[str], warnings: List[str] = None, **kwargs):
        lines = ["error parsing recipe:"]
        lines.extend(f"  - {error}" for error in errors)
        super().__init__(
            "\n".join(lines),
            details={"errors": list(errors), "warnings": list(warnings or [])},
            category=ErrorCategory.PARSING,
            **kwargs
        )
        self.errors = list(errors)
        self.warnings = list(warnings or [])


class TemplateRenderError(ReportError):
    """Template failed to compile or render."""

    HINTS = {
        "syntax": [
            "This is a syntax error. Check for:",
            "  • Missing closing tags ({% endfor %}, {% endif %}, etc.)",
            "  • Invalid Jinja2 syntax",
            "  • Unclosed strings or brackets",
        ],
        "undefined": [
            "A variable or attribute is undefined. Check that:",
            "  • All variables used in the template exist in the context",
            "  • Property names are spelled correctly",
            "  • You're not trying to access properties on null values",
        ],
        "invalid_operation": [
            "Invalid operation. Check that:",
            "  • You're using the correct types for operations",
            "  • Functions are called with correct arguments",
            "  • Filters are applied to compatible values",
        ],
    }

    def __init__(self, message: str, kind: str = "invalid_operation", lineno: Optional[int] = None,
                 source_line: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            details={"kind": kind, "lineno": lineno},
            category=ErrorCategory.TEMPLATE,
            **kwargs
        )
        self.kind = kind
        self.lineno = lineno
        self.source_line = source_line

    def describe(self) -> str:
        """Message with location, offending line and hints."""
        lines = [f"template error ({self.kind.replace('_', ' ')}): {self.message}"]
        if self.lineno is not None:
            lines.append(f"  --> line {self.lineno}")
        if self.source_line:
            lines.append(f"   | {self.source_line}")
        hints = self.HINTS.get(self.kind)
        if hints:
            lines.append("")
            lines.append("Hint: " + hints[0])
            lines.extend(hints[1:])
        return "\n".join(lines)


def format_with_source(error: BaseException) -> str:
    """
    Format an error with its complete causal chain.

    Args:
        error: Error to format

    Returns:
        Primary message followed by one "Caused by" block per chained cause
    """
    if isinstance(error, TemplateRenderError):
        output = error.describe()
    else:
        output = f"Error: {error}"

    seen = {id(error)}
    current = _next_cause(error)
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        output += f"\n\nCaused by:\n    {current}"
        current = _next_cause(current)

    return output


def _next_cause(error: BaseException) -> Optional[BaseException]:
    if isinstance(error, ReferenceResolutionError):
        return error.cause
    return error.__cause__
