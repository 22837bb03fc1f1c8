# depman/__init__.py
"""depman: forward flutter pub get/upgrade for a package directory and relay the result."""

from __future__ import annotations

from .service import PubService

__version__ = "0.1.0"

__all__ = ["PubService", "__version__"]
