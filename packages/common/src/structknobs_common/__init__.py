"""Common base classes shared by structknobs packages.

- **Exceptions**: Unified exception hierarchy with context support

Example:
    ```python
    from structknobs_common import StructknobsError

    raise StructknobsError("Something went wrong", context={"details": "here"})
    ```
"""

from structknobs_common.exceptions import (
    ConfigurationError,
    StructknobsError,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "StructknobsError",
    "ValidationError",
    "ConfigurationError",
]
