"""
Configuration management for the POMDP solver.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


class Config:
    """Application configuration settings."""

    # Base paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    OUTPUT_DIR: Path = Path(os.getenv("OUTPUT_DIR", str(PROJECT_ROOT / "output")))
    DOMAIN_DIR: Path = Path(os.getenv("DOMAIN_DIR", str(PROJECT_ROOT / "domains")))
    SOLVER_CONFIG: Path = Path(os.getenv("SOLVER_CONFIG", str(PROJECT_ROOT / "solver.yaml")))

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Simulation settings
    DEFAULT_RANDOM_SEED: int = int(os.getenv("RANDOM_SEED", "42"))

    @classmethod
    def ensure_directories(cls) -> None:
        """Ensure the output directory exists."""
        cls.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
