"""
Package version. Keep in sync with pyproject.toml; the transports send it in
their User-Agent (``grug-sdk-py/<version>``).
"""

# Bump this when publishing
__version__ = "0.1.0"

__all__ = ["__version__"]
