"""
Storage for the RiskViz API.

Each table holds one record type and supports insert / all / clear. Two
backends exist: an in-memory list and a CSV file per table (pandas).
Any backend failure surfaces as StorageError; nothing is retried.
"""

import copy
import json
import os
import threading
from pathlib import Path
from typing import Dict, List, Type

import pandas as pd
from pydantic import BaseModel, ValidationError

from riskviz_dashboard.config import ServerConfig
from riskviz_dashboard.errors import StorageError
from riskviz_dashboard.logger import get_logger
from riskviz_dashboard.models import GraphPoint, RiskRecord, StoredResponse

logger = get_logger(__name__)


class Table:
    """A named collection of records validated by ``model``."""

    def __init__(self, name: str, model: Type[BaseModel]):
        self.name = name
        self.model = model
        self._lock = threading.Lock()

    def insert(self, record: BaseModel) -> Dict:
        raise NotImplementedError

    def all(self) -> List[Dict]:
        raise NotImplementedError

    def clear(self) -> int:
        raise NotImplementedError


class MemoryTable(Table):
    def __init__(self, name: str, model: Type[BaseModel]):
        super().__init__(name, model)
        self._rows: List[Dict] = []

    def insert(self, record: BaseModel) -> Dict:
        row = record.model_dump()
        with self._lock:
            self._rows.append(row)
        return copy.deepcopy(row)

    def all(self) -> List[Dict]:
        with self._lock:
            return copy.deepcopy(self._rows)

    def clear(self) -> int:
        with self._lock:
            removed = len(self._rows)
            self._rows = []
        return removed


class CsvTable(Table):
    """
    One CSV file per table. Rows are appended by rewriting the file the
    way the dashboard always has: load, concat, write.
    Fields named in ``json_fields`` are stored as JSON text.
    """

    def __init__(self, name: str, model: Type[BaseModel], path: Path, json_fields=()):
        super().__init__(name, model)
        self.path = Path(path)
        self.json_fields = tuple(json_fields)
        self.columns = list(model.model_fields)

    def _load_df(self) -> pd.DataFrame:
        if os.path.exists(self.path):
            return pd.read_csv(self.path, dtype=str, keep_default_na=False)
        return pd.DataFrame(columns=self.columns)

    def _encode(self, row: Dict) -> Dict:
        encoded = dict(row)
        for field in self.json_fields:
            encoded[field] = json.dumps(encoded.get(field))
        return encoded

    def _decode(self, row: Dict) -> Dict:
        for field in self.json_fields:
            raw = row.get(field)
            row[field] = json.loads(raw) if raw else None
        return self.model.model_validate(row).model_dump()

    def insert(self, record: BaseModel) -> Dict:
        row = record.model_dump()
        try:
            with self._lock:
                df = self._load_df()
                new_df = pd.DataFrame([self._encode(row)], columns=self.columns)
                df = new_df if df.empty else pd.concat([df, new_df], ignore_index=True)
                df.to_csv(self.path, index=False)
        except (OSError, ValueError, pd.errors.ParserError) as e:
            logger.error("storage_write_failed", table=self.name, path=str(self.path), error=str(e))
            raise StorageError(f"Failed to write to {self.name}") from e
        return row

    def all(self) -> List[Dict]:
        try:
            with self._lock:
                df = self._load_df()
            return [self._decode(row) for row in df.to_dict(orient="records")]
        except (OSError, ValueError, ValidationError, pd.errors.ParserError) as e:
            logger.error("storage_read_failed", table=self.name, path=str(self.path), error=str(e))
            raise StorageError(f"Failed to read {self.name}") from e

    def clear(self) -> int:
        try:
            with self._lock:
                removed = len(self._load_df())
                pd.DataFrame(columns=self.columns).to_csv(self.path, index=False)
        except (OSError, ValueError, pd.errors.ParserError) as e:
            logger.error("storage_clear_failed", table=self.name, path=str(self.path), error=str(e))
            raise StorageError(f"Failed to clear {self.name}") from e
        return removed


class Store:
    """The three tables the API writes to and reads from."""

    def __init__(self, responses: Table, risk_data: Table, points: Table, backend: str):
        self.responses = responses
        self.risk_data = risk_data
        self.points = points
        self.backend = backend
        self.closed = False

    def close(self) -> None:
        self.closed = True


def connect_to_database(config: ServerConfig) -> Store:
    """Open the store selected by ``config.storage_backend``."""
    if config.storage_backend == "memory":
        store = Store(
            responses=MemoryTable("responses", StoredResponse),
            risk_data=MemoryTable("risk_data", RiskRecord),
            points=MemoryTable("graph_points", GraphPoint),
            backend="memory",
        )
    else:
        data_dir = Path(config.data_dir)
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {data_dir}") from e
        store = Store(
            responses=CsvTable("responses", StoredResponse, data_dir / "responses.csv", json_fields=("answers",)),
            risk_data=CsvTable("risk_data", RiskRecord, data_dir / "risk_data.csv"),
            points=CsvTable("graph_points", GraphPoint, data_dir / "graph_points.csv"),
            backend="csv",
        )
    logger.info("storage_connected", backend=store.backend, data_dir=str(config.data_dir))
    return store


def close_database_connection(store: Store) -> None:
    store.close()
    logger.info("storage_closed", backend=store.backend)
