# https_scout/__init__.py
"""
HttpsScout package initializer.
Defines package version; the CLI entry point lives in ``https_scout.cli``.
"""
__version__ = "0.1.0"
