"""feedgrab - collect gallery URLs from an infinite-scroll feed and download them."""

from .checkpoint import CheckpointStore
from .collector import ResponseCollector
from .config import HarvestConfig
from .convergence import ConvergenceDetector, Decision
from .downloader import Downloader
from .loader import ProgressiveLoader
from .runner import SessionRunner

__version__ = "0.1.0"
__all__ = [
    "CheckpointStore",
    "ConvergenceDetector",
    "Decision",
    "Downloader",
    "HarvestConfig",
    "ProgressiveLoader",
    "ResponseCollector",
    "SessionRunner",
]
