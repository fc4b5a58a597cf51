"""UPSC Prelims quiz engine.

Loads question banks, runs timed or untimed quiz sessions with UPSC negative
marking, and keeps attempt history and a mistake bank in a local JSON store.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
