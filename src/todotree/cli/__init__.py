"""CLI package.

The ``cli`` sub-package contains the Click application, its commands,
and the Rich renderers they print with.
"""
from __future__ import annotations
