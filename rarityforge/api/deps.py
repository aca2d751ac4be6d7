from pathlib import Path

from rarityforge.config import settings


def get_output_dir() -> Path:
    """Directory holding built collection databases."""
    return settings.output_dir
