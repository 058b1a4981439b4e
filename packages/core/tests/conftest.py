"""Pytest configuration for structknobs_core tests."""

import sys
from pathlib import Path

import pytest

# Add the package sources to path for testing
package_root = Path(__file__).parent.parent
for src_path in (package_root / "src", package_root.parent / "common" / "src"):
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))

from structknobs_core import number, object_, optional, string  # noqa: E402


@pytest.fixture
def user_struct():
    """Object struct with a required name and an optional age."""
    return object_({"name": string(), "age": optional(number())})
