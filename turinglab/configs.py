"""Configuration dataclasses for Turing Lab."""

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Any, Literal

import yaml


@dataclass
class GridConfig:
    """Grid dimensions shared by both fields."""
    rows: int = 128
    cols: int = 128

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(
                f"Grid dimensions must be positive, got {self.rows}x{self.cols}"
            )


@dataclass
class ModelConfig:
    """Reaction model selection and coefficients.

    The activator-substrate coefficients are used when name is
    "activator_substrate" (alias "model1"); feed/kill plus d_a/d_b
    are used by "gray_scott". Leaving d_a or d_b unset picks the
    selected model's own diffusion default.
    """
    name: Literal["activator_substrate", "model1", "gray_scott"] = "activator_substrate"
    d_a: float | None = None
    """Diffusion constant of the activator (Da). None uses the model default."""
    d_b: float | None = None
    """Diffusion constant of the substrate (Db). None uses the model default."""
    rho_a: float = 0.01
    rho_b: float = 0.02
    mu_a: float = 0.01
    mu_b: float = 0.02
    k_a: float = 0.25
    """Saturation constant of the activator production term (Ka)."""
    sigma_a: float = 0.0
    sigma_b: float = 0.0
    feed: float = 0.035
    kill: float = 0.065

    def to_parameters(self) -> Any:
        """Build the immutable parameter record for the selected model."""
        from turinglab.models.activator_substrate import ModelParameters
        from turinglab.models.gray_scott import GrayScottParameters

        diffusion = {
            k: v for k, v in (("d_a", self.d_a), ("d_b", self.d_b)) if v is not None
        }
        if self.name == "gray_scott":
            return GrayScottParameters(**diffusion, feed=self.feed, kill=self.kill)
        return ModelParameters(
            **diffusion,
            rho_a=self.rho_a,
            rho_b=self.rho_b,
            mu_a=self.mu_a,
            mu_b=self.mu_b,
            k_a=self.k_a,
            sigma_a=self.sigma_a,
            sigma_b=self.sigma_b,
        )


@dataclass
class RunConfig:
    """Step loop configuration."""
    iterations: int = 1000
    seed: int = 0
    check_finite: bool = True
    """Log a warning the first time a step produces NaN or inf values."""

    def __post_init__(self) -> None:
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {self.iterations}")


@dataclass
class LogConfig:
    """Logging configuration."""
    wandb: bool = False
    project: str = "turing-lab"
    log_interval: int = 100

    def __post_init__(self) -> None:
        if self.log_interval <= 0:
            raise ValueError(f"log_interval must be > 0, got {self.log_interval}")


@dataclass
class ServerConfig:
    """Frame streaming server configuration."""
    enabled: bool = False
    host: str = "0.0.0.0"
    port: int = 8765
    target_fps: float = 30.0


@dataclass
class Config:
    """Master configuration combining all sub-configs."""
    grid: GridConfig = dataclass_field(default_factory=GridConfig)
    model: ModelConfig = dataclass_field(default_factory=ModelConfig)
    run: RunConfig = dataclass_field(default_factory=RunConfig)
    log: LogConfig = dataclass_field(default_factory=LogConfig)
    server: ServerConfig = dataclass_field(default_factory=ServerConfig)

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        """Load config from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls(
            grid=GridConfig(**data.get("grid", {})),
            model=ModelConfig(**data.get("model", {})),
            run=RunConfig(**data.get("run", {})),
            log=LogConfig(**data.get("log", {})),
            server=ServerConfig(**data.get("server", {})),
        )

    def to_yaml(self, path: str) -> None:
        """Save config to YAML file."""
        import dataclasses

        with open(path, 'w') as f:
            yaml.dump(dataclasses.asdict(self), f, default_flow_style=False)
