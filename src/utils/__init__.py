"""Shared utilities for configuration handling and run directory management."""

from .config import ensure_run_dir, load_config, with_defaults

__all__ = ["load_config", "with_defaults", "ensure_run_dir"]
