"""
Pydantic schemas for configuration validation.

Type-safe configuration classes for the execution strategy, simulation
settings and logging, loadable from YAML.
"""

from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator
import yaml


class ExecutionConfig(BaseModel):
    """How gate kernels are scheduled across index partitions."""

    strategy: str = Field(
        default="sequential",
        description="Execution strategy (sequential, threads)"
    )
    unit_size: int = Field(
        default=256,
        ge=1,
        description="Work units (amplitude pairs or quads) per partition"
    )
    max_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Worker threads for the 'threads' strategy (None = CPU count)"
    )

    @field_validator("strategy")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        """Ensure strategy is supported."""
        allowed = {"sequential", "threads"}
        if v not in allowed:
            raise ValueError(f"Strategy must be one of {allowed}, got '{v}'")
        return v


class SimulationConfig(BaseModel):
    """Simulation parameters (memory budget, checks, sampling)."""

    memory_capacity_bytes: Optional[int] = Field(
        default=None,
        ge=0,
        description="Resource pool capacity in bytes (None = available system memory)"
    )
    check_norm: bool = Field(
        default=True,
        description="Verify the state norm after running a circuit"
    )
    norm_tolerance: float = Field(
        default=1e-9,
        gt=0.0,
        description="Allowed deviation of ||psi||^2 from 1"
    )
    optimize: bool = Field(
        default=False,
        description="Run the peephole optimizer before simulating"
    )
    shots: int = Field(
        default=1024,
        ge=1,
        description="Number of samples drawn from the final distribution"
    )
    seed: Optional[int] = Field(
        default=None,
        description="Random seed for sampling (None = system entropy)"
    )


class LoggingConfig(BaseModel):
    """Logging setup for the command-line front end."""

    level: str = Field(
        default="INFO",
        description="Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    json_format: bool = Field(
        default=False,
        description="Emit JSON-structured log records"
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Optional file to mirror log output into"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Ensure level is a standard logging level name."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of {sorted(allowed)}, got '{v}'")
        return v.upper()


class Config(BaseModel):
    """Top-level configuration combining execution, simulation and logging."""

    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata (run name, notes, etc.)"
    )

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "Config":
        """Load configuration from YAML file."""
        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f)
        return cls(**(data or {}))

    def to_yaml(self, yaml_path: Path) -> None:
        """Save configuration to YAML file."""
        with open(yaml_path, "w") as f:
            yaml.safe_dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )
