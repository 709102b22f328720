"""
Configuration for evaluation acquisition.
"""

from dataclasses import dataclass
from typing import Optional

LICHESS_CLOUD_EVAL_URL = "https://lichess.org/api/cloud-eval"


@dataclass
class ReviewConfig:
    """Configuration for a game review run.

    Groups the local engine, cloud lookup and scheduler settings so one
    object can be passed from the CLI down to the orchestrator.
    """

    # Local engine
    target_depth: int = 16
    """Search depth requested for every local evaluation"""

    max_concurrency: int = 8
    """Maximum number of local engine instances running at once"""

    max_attempts: int = 2
    """Attempts per position before it is marked unresolved (1 retry)"""

    stockfish_path: Optional[str] = None
    """Path to the Stockfish binary (None = auto-detect)"""

    stockfish_threads: int = 1
    """Threads per Stockfish instance"""

    # Cloud lookup
    cloud_enabled: bool = True
    """Try the cloud evaluation service before falling back to local engines"""

    cloud_url: str = LICHESS_CLOUD_EVAL_URL
    """Cloud evaluation endpoint"""

    cloud_timeout: float = 10.0
    """Per-request timeout for cloud lookups, in seconds"""

    # Scheduler
    tick_interval: float = 0.1
    """Seconds between scheduler ticks during the local pass"""

    timeout: Optional[float] = None
    """Budget for the whole run in seconds (None = no limit)"""

    show_progress: bool = False
    """Display a tqdm progress bar"""

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.target_depth <= 0:
            raise ValueError(f"target_depth must be positive, got {self.target_depth}")

        if self.max_concurrency <= 0:
            raise ValueError(
                f"max_concurrency must be positive, got {self.max_concurrency}"
            )

        if self.max_attempts <= 0:
            raise ValueError(f"max_attempts must be positive, got {self.max_attempts}")

        if self.stockfish_threads <= 0:
            raise ValueError(
                f"stockfish_threads must be positive, got {self.stockfish_threads}"
            )

        if self.cloud_timeout <= 0:
            raise ValueError(f"cloud_timeout must be positive, got {self.cloud_timeout}")

        if self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {self.tick_interval}")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive or None, got {self.timeout}")
