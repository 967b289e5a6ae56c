"""
Configuration management.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List

from core.valuation_engine import ValuationPolicy
from core.valuation_engine.statistics import DEFAULT_OUTLIER_Z_THRESHOLD
from core.valuation_engine.valuation import DEFAULT_BASELINE_GRADE, DEFAULT_MIN_SIMILARITY


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    production: bool = field(
        default_factory=lambda: os.getenv("PRODUCTION", "").lower() == "true"
    )
    allowed_origins: List[str] = field(default_factory=lambda: _env_list("ALLOWED_ORIGINS"))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # Valuation policy
    baseline_grade: float = field(
        default_factory=lambda: float(
            os.getenv("VALUATION_BASELINE_GRADE", str(DEFAULT_BASELINE_GRADE))
        )
    )
    outlier_z_threshold: float = field(
        default_factory=lambda: float(
            os.getenv("VALUATION_OUTLIER_Z", str(DEFAULT_OUTLIER_Z_THRESHOLD))
        )
    )
    min_similarity: int = field(
        default_factory=lambda: int(
            os.getenv("VALUATION_MIN_SIMILARITY", str(DEFAULT_MIN_SIMILARITY))
        )
    )

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def configure_logging(self) -> None:
        """Configure root logging at the configured level."""
        logging.basicConfig(
            level=getattr(logging, self.log_level, logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    def valuation_policy(self) -> ValuationPolicy:
        """Policy knobs for the Valuation Engine."""
        return ValuationPolicy(
            baseline_grade=self.baseline_grade,
            outlier_z_threshold=self.outlier_z_threshold,
            min_similarity=self.min_similarity,
        )

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "production": self.production,
            "allowed_origins": list(self.allowed_origins),
            "log_level": self.log_level,
            "baseline_grade": self.baseline_grade,
            "outlier_z_threshold": self.outlier_z_threshold,
            "min_similarity": self.min_similarity,
        }
