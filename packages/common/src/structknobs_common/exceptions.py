"""Common exception hierarchy for all structknobs packages.

Every error raised by a structknobs package derives from
``StructknobsError``, which carries an optional context dictionary with
structured details about the failure.

Example:
    ```python
    from structknobs_common.exceptions import ValidationError

    # Simple exception
    raise ValidationError("Expected a string")

    # Context-rich exception
    raise ValidationError(
        "Expected a string",
        context={"path": ["user", "name"], "value": 42}
    )

    # Catch any structknobs error
    try:
        operation()
    except StructknobsError as e:
        logger.error(f"Error: {e}")
        if e.context:
            logger.error(f"Context: {e.context}")
    ```
"""

from typing import Any, Dict


class StructknobsError(Exception):
    """Base exception for all structknobs packages.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (both are supported)

    Example:
        ```python
        error = StructknobsError(
            "Validation failed",
            context={"path": ["a"], "type": "string"}
        )
        str(error)
        # 'Validation failed'
        error.context
        # {'path': ['a'], 'type': 'string'}
        ```
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        """Initialize the exception with optional context.

        Args:
            message: Error message
            context: Optional context dictionary
            details: Optional details dictionary (takes precedence over context)
        """
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ValidationError(StructknobsError):
    """Raised when a value does not match the shape it is validated against.

    Example:
        ```python
        raise ValidationError(
            "Expected a value of type `number`",
            context={"path": ["age"], "value": "ten"}
        )
        ```
    """

    pass


class ConfigurationError(StructknobsError):
    """Raised when a struct is built with invalid arguments.

    This is a programming error detected at construction time, for example
    a size refinement whose minimum exceeds its maximum.

    Example:
        ```python
        raise ConfigurationError(
            "enums() requires at least one value",
            context={"values": []}
        )
        ```
    """

    pass


__all__ = [
    "StructknobsError",
    "ValidationError",
    "ConfigurationError",
]
