import logging
from pathlib import Path
from typing import Iterable

from .downloader import image_dir_for

logger = logging.getLogger(__name__)


def initialize_directories(output_dir: Path, images_dir: Path, terms: Iterable[str]) -> None:
    """Create the checkpoint directory and one image directory per term."""
    for directory in [Path(output_dir), Path(images_dir)] + [image_dir_for(images_dir, t) for t in terms]:
        if not directory.exists():
            directory.mkdir(parents=True, exist_ok=True)
            logger.info("created directory %s", directory)
