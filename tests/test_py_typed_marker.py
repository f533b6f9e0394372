"""
Tests for PEP 561 py.typed marker file.
"""

from pathlib import Path

PY_TYPED = Path(__file__).parent.parent / "src" / "pullgen" / "py.typed"


def test_py_typed_marker_exists():
    """Test that py.typed marker file exists in the package for PEP 561 compliance."""
    assert PY_TYPED.exists(), (
        f"py.typed marker file not found at {PY_TYPED}. "
        "This file is required for PEP 561 compliance to export type information."
    )
    assert PY_TYPED.is_file(), f"{PY_TYPED} should be a file, not a directory"


def test_py_typed_marker_content():
    """Test that py.typed marker file is empty or marks partial typing."""
    content = PY_TYPED.read_text()
    assert content in ("", "partial\n"), (
        f"py.typed should be empty or contain 'partial\\n', got: {repr(content)}"
    )
