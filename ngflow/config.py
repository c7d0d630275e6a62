"""Configuration classes for ngflow components."""

from dataclasses import dataclass

from ngflow.lib.numeric import DEFAULT_EPSILON


@dataclass
class DinicConfig:
    """Configuration for the Dinic max-flow engine."""

    # Tolerance used to decide that a phase pushed no flow
    epsilon: float = DEFAULT_EPSILON

    # Edge attribute holding the capacity
    capacity_attr: str = "capacity"

    # Threads used to build the residual graph; 1 builds it serially
    workers: int = 1

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        if self.epsilon < 0:
            raise ValueError(f"epsilon must be non-negative, got {self.epsilon}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")


# Global configuration instance
DINIC_CONFIG = DinicConfig()
