"""relkit-cli: Command-line interface for relkit.

Provides the ``relkit`` command for building release binaries and
running the validation gate.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
