"""Postal code -> "prefecture + city" reference table.

Built once from Japan Post's ``utf_ken_all.csv``: column 2 is the 7-digit code,
6 the prefecture, 7 the city. Only city level is kept; it geocodes better than
full town names.
"""

import csv
import logging
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path

from taskdeck.config import get_settings

logger = logging.getLogger(__name__)

ZIP_COL = 2
PREF_COL = 6
CITY_COL = 7
MIN_COLS = 9


def normalize_zipcode(zipcode: str) -> str:
    return "".join(zipcode.split()).replace("-", "")


class ZipTable:
    def __init__(self, entries: dict[str, str] | None = None):
        self._entries = dict(entries or {})

    @classmethod
    def from_rows(cls, rows: Iterable[list[str]]) -> "ZipTable":
        entries: dict[str, str] = {}
        for row in rows:
            if len(row) < MIN_COLS:
                continue
            entries[row[ZIP_COL]] = f"{row[PREF_COL]}{row[CITY_COL]}"
        return cls(entries)

    @classmethod
    def from_csv(cls, path: Path) -> "ZipTable":
        with open(path, newline="", encoding="utf-8-sig") as f:
            return cls.from_rows(csv.reader(f))

    def get(self, zipcode: str) -> str | None:
        return self._entries.get(normalize_zipcode(zipcode))

    def __len__(self) -> int:
        return len(self._entries)


@lru_cache
def get_zip_table() -> ZipTable:
    path = get_settings().zip_csv_file
    if not path.exists():
        logger.info("No postal dataset at %s; region lookups will return nothing", path)
        return ZipTable()
    table = ZipTable.from_csv(path)
    logger.info("Loaded %d postal codes from %s", len(table), path)
    return table
