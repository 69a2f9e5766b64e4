from __future__ import annotations

from typing import Literal

from .backends.csv_backend import CsvLedgerStore
from .interface import LedgerStore
from ..config import get_config


def get_ledger_store(kind: Literal["csv"] = "csv") -> LedgerStore:
    if kind == "csv":
        # Reads from configured CSV folder
        config = get_config()
        return CsvLedgerStore(data_dir=config.data_dir)
    raise ValueError(f"Unknown ledger store kind: {kind}")
