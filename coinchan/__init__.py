"""
Coinchan client core.

Shared infrastructure (logging, exceptions, utils) for the ZAMM pricing,
slippage and routing engine in the ``zamm`` package.
"""

__version__ = "0.3.0"

PROJECT_NAME = "coinchan-zamm"
VERSION = __version__

__all__ = ["PROJECT_NAME", "VERSION", "__version__"]
