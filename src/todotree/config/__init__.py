"""Configuration module.

Exports ``Config``, ``CliOptions`` and ``load_config``.
"""
from __future__ import annotations

from todotree.config.loader import CliOptions, Config, load_config

__all__ = ["CliOptions", "Config", "load_config"]
