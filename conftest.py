"""Pytest configuration and fixtures.

This file sets up the Python path so tests can import from the backend package
and share the in-memory fakes in ``tests/fakes.py``.
"""

import sys
from pathlib import Path

# Add backend directory to Python path for imports
backend_path = Path(__file__).parent / "backend"
sys.path.insert(0, str(backend_path))

# Repository root, for ``tests.fakes``
sys.path.insert(0, str(Path(__file__).parent))
