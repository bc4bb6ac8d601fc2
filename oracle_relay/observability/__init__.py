"""Observability package for logging configuration."""

from .log_config import observability_configure_logging

__all__ = ["observability_configure_logging"]
