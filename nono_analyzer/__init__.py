"""Restricted-runtime (no_std) compatibility analyzer for Cargo packages."""

__version__ = "0.1.0"
