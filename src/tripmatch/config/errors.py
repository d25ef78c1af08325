"""Errors raised while assembling tripmatch configuration."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A configuration value is present but unusable, e.g. inverted score bands."""
