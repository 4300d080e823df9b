"""
Configuration management for quantummesh.

Provides Pydantic-validated configuration schemas and YAML loading utilities.
"""

from .schemas import ExecutionConfig, SimulationConfig, LoggingConfig, Config

__all__ = ["ExecutionConfig", "SimulationConfig", "LoggingConfig", "Config"]
