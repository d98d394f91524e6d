"""fastcheck: parallel file fingerprinting, snapshot diffing and verification."""

from .constants import FASTCHECK_VERSION as __version__

__all__ = ["__version__"]
