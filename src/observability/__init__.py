"""Telemetry and monitoring helpers.

Exports:
    init_logfire: Configure Pydantic Logfire console output and export.
"""

from .monitoring import init_logfire

__all__ = ["init_logfire"]
