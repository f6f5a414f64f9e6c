"""
Configuration management for kmeans_study.

Loads clustering defaults from environment variables (typically from a .env
file). Uses python-dotenv to load .env automatically.

Usage:
    from kmeans_study.config import config

    restarts = config.clustering.restarts
    seed = config.clustering.seed
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Look for .env in project root (parent of src/)
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


@dataclass
class ClusteringDefaults:
    """Default parameters for partitioning and cluster-count advice."""

    restarts: int = 25
    max_iterations: int = 100
    seed: int = 123
    n_workers: int = 1
    k_min: int = 1
    k_max: int = 10
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate that values are usable."""
        if self.restarts < 1:
            raise ValueError(f"KMEANS_RESTARTS must be >= 1, got {self.restarts}")
        if self.max_iterations < 1:
            raise ValueError(
                f"KMEANS_MAX_ITER must be >= 1, got {self.max_iterations}"
            )
        if self.seed < 0:
            raise ValueError(f"KMEANS_SEED must be >= 0, got {self.seed}")
        if self.n_workers < 1:
            raise ValueError(f"KMEANS_WORKERS must be >= 1, got {self.n_workers}")
        if self.k_min < 1:
            raise ValueError(f"KMEANS_K_MIN must be >= 1, got {self.k_min}")
        if self.k_max < self.k_min:
            raise ValueError(
                f"KMEANS_K_MAX ({self.k_max}) must be >= KMEANS_K_MIN ({self.k_min})"
            )
        self.log_level = self.log_level.upper()


class Config:
    """
    Application configuration loaded from environment variables.

    Environment variables can be set:
    1. In a .env file in the project root
    2. In the system environment
    """

    def __init__(self):
        """Load configuration from environment."""
        self.clustering = ClusteringDefaults(
            restarts=_env_int("KMEANS_RESTARTS", 25),
            max_iterations=_env_int("KMEANS_MAX_ITER", 100),
            seed=_env_int("KMEANS_SEED", 123),
            n_workers=_env_int("KMEANS_WORKERS", 1),
            k_min=_env_int("KMEANS_K_MIN", 1),
            k_max=_env_int("KMEANS_K_MAX", 10),
            log_level=os.getenv("KMEANS_LOG_LEVEL", "INFO"),
        )


# Global config instance
config = Config()
