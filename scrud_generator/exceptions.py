"""
Custom exception hierarchy for the SCRUD generator.

Every error carries a machine readable error code, optional context about
where it happened and a list of suggestions for the user. The orchestrator
converts model level errors into report entries; only configuration errors
are allowed to abort a whole run.
"""

from typing import Dict, Any, Optional, List


class ScrudGeneratorError(Exception):
    """
    Base exception for all SCRUD generator errors.

    Provides rich context and error recovery guidance.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [super().__str__()]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class ConfigurationError(ScrudGeneratorError):
    """Raised when the run configuration is invalid or missing."""

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.get('context', {})
        if config_file:
            context['config_file'] = config_file

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the configuration file syntax",
                "Verify the model metadata paths exist",
                "Check the documentation for configuration examples"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CONFIG_ERROR"
        )


class UnresolvableModel(ScrudGeneratorError):
    """Raised when model metadata is insufficient to build a model descriptor."""

    def __init__(self, message: str, model: str = None, field: str = None, **kwargs):
        context = kwargs.get('context', {})
        if model:
            context['model'] = model
        if field:
            context['field'] = field

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Declare an identifier (scalar type or 2 to 4 components)",
                "Make sure every to-one relation names a known target type",
                "Add hand-written DTO types to 'known_types' in the configuration"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="UNRESOLVABLE_MODEL"
        )


class MalformedIdentifier(ScrudGeneratorError, ValueError):
    """Raised when a composite identifier string does not match the expected arity."""

    def __init__(self, message: str, value: str = None, arity: int = None, **kwargs):
        context = kwargs.get('context', {})
        if value is not None:
            context['value'] = value
        if arity is not None:
            context['arity'] = arity

        super().__init__(
            message,
            context=context,
            suggestions=kwargs.get('suggestions', []),
            error_code="MALFORMED_IDENTIFIER"
        )


class DuplicateArtifactName(ScrudGeneratorError):
    """Raised when two artifact specifications in one run share a qualified name."""

    def __init__(self, message: str, qualified_name: str = None, model: str = None, **kwargs):
        context = kwargs.get('context', {})
        if qualified_name:
            context['qualified_name'] = qualified_name
        if model:
            context['model'] = model

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check for two models sharing the same package and name",
                "Review the naming.* overrides in the run properties"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="DUPLICATE_ARTIFACT_NAME"
        )


class EmissionIOFailure(ScrudGeneratorError):
    """Raised when a rendered artifact cannot be written to the output store."""

    def __init__(self, message: str, qualified_name: str = None, path: str = None, **kwargs):
        context = kwargs.get('context', {})
        if qualified_name:
            context['qualified_name'] = qualified_name
        if path:
            context['path'] = path

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the output directory exists and is writable",
                "Check available disk space"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="EMISSION_IO_FAILURE"
        )


class SpecBuildError(ScrudGeneratorError):
    """Raised when an artifact spec builder rejects a model descriptor."""

    def __init__(self, message: str, component: str = None, model: str = None, **kwargs):
        context = kwargs.get('context', {})
        if component:
            context['component'] = component  # e.g., 'repository', 'dto'
        if model:
            context['model'] = model

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check attribute paths only traverse relation fields",
                "Try generating one component at a time"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="SPEC_BUILD_ERROR"
        )
