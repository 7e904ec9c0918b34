"""Seed the listings table from CSV demo data."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd

from ..config import get_settings
from ..utils.logging import get_logger
from .mappers import map_seed_row
from .repo import Repo, get_repository

LOGGER = get_logger("db.seed")

LISTINGS_CSV = "listings.csv"


def load_dataframe(name: str, data_dir: Optional[Path] = None) -> pd.DataFrame:
    path = (data_dir or get_settings().data_dir) / name
    if not path.exists():
        raise FileNotFoundError(f"Missing data file: {path}")
    # every cell stays text; numeric parsing happens in the mapper
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def seed(repo: Optional[Repo] = None, data_dir: Optional[Path] = None) -> int:
    repo = repo or get_repository()
    LOGGER.info("Loading listings")
    frame = load_dataframe(LISTINGS_CSV, data_dir=data_dir)
    count = 0
    for record in frame.to_dict(orient="records"):
        repo.create_listing(map_seed_row(record))
        count += 1
    LOGGER.info("Seed complete rows=%d", count)
    return count


if __name__ == "__main__":
    seed()
