"""Observability helpers (logging setup)."""

from index_bloom.observability.logging import JsonFormatter, configure_logging


__all__ = ["JsonFormatter", "configure_logging"]
