"""Input and output helpers.

Exports:
    load_app_config: Read and validate the optional YAML configuration file.
"""

from __future__ import annotations

from .loader import load_app_config

__all__ = ["load_app_config"]
