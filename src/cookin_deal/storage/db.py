"""DuckDB storage for saved deals."""

from __future__ import annotations

import json
import uuid
from datetime import datetime
from pathlib import Path

import duckdb

from ..models import DealInput, SavedDeal


class Storage:
    """
    DuckDB key-value store of saved deals, keyed by owner (user or session).
    Stores the raw DealInput only; calculations are recomputed on read.
    """

    def __init__(self, db_path: Path | str = "cookin_deal.duckdb") -> None:
        self.db_path = Path(db_path)
        self._conn: duckdb.DuckDBPyConnection | None = None

    def _connect(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = duckdb.connect(str(self.db_path))
            self._init_schema()
        return self._conn

    def _init_schema(self) -> None:
        conn = self._conn
        conn.execute("""
            CREATE TABLE IF NOT EXISTS saved_deals (
                owner_key TEXT,
                deal_id TEXT,
                name TEXT,
                deal_input JSON,
                created_at TIMESTAMP,
                updated_at TIMESTAMP,
                PRIMARY KEY (owner_key, deal_id)
            )
        """)

    def save_deal(
        self,
        owner_key: str,
        deal: DealInput,
        deal_id: str | None = None,
        name: str = "",
    ) -> str:
        """Insert or update a deal. Returns its deal_id."""
        conn = self._connect()
        deal_id = deal_id or uuid.uuid4().hex[:12]
        now = datetime.utcnow()
        row = conn.execute(
            "SELECT created_at FROM saved_deals WHERE owner_key = ? AND deal_id = ?",
            [owner_key, deal_id],
        ).fetchone()
        created_at = row[0] if row else now
        conn.execute(
            """
            INSERT OR REPLACE INTO saved_deals
            (owner_key, deal_id, name, deal_input, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                owner_key,
                deal_id,
                name or deal.property_info.full_address,
                json.dumps(deal.to_dict()),
                created_at,
                now,
            ],
        )
        return deal_id

    def load_deal(self, owner_key: str, deal_id: str) -> DealInput | None:
        """Load one deal's input, or None if it does not exist."""
        saved = self.get_saved_deal(owner_key, deal_id)
        return saved.deal if saved else None

    def get_saved_deal(self, owner_key: str, deal_id: str) -> SavedDeal | None:
        """Load one deal with its bookkeeping fields."""
        conn = self._connect()
        row = conn.execute(
            """
            SELECT owner_key, deal_id, name, deal_input, created_at, updated_at
            FROM saved_deals WHERE owner_key = ? AND deal_id = ?
            """,
            [owner_key, deal_id],
        ).fetchone()
        return self._row_to_saved(row) if row else None

    def list_deals(self, owner_key: str) -> list[SavedDeal]:
        """All deals for an owner, most recently updated first."""
        conn = self._connect()
        rows = conn.execute(
            """
            SELECT owner_key, deal_id, name, deal_input, created_at, updated_at
            FROM saved_deals WHERE owner_key = ?
            ORDER BY updated_at DESC, deal_id
            """,
            [owner_key],
        ).fetchall()
        return [self._row_to_saved(r) for r in rows]

    def delete_deal(self, owner_key: str, deal_id: str) -> bool:
        """Delete a deal. Returns True if it existed."""
        if self.get_saved_deal(owner_key, deal_id) is None:
            return False
        conn = self._connect()
        conn.execute(
            "DELETE FROM saved_deals WHERE owner_key = ? AND deal_id = ?",
            [owner_key, deal_id],
        )
        return True

    def _row_to_saved(self, row: tuple) -> SavedDeal:
        cols = ["owner_key", "deal_id", "name", "deal_input", "created_at", "updated_at"]
        d = dict(zip(cols, row))
        raw = d["deal_input"]
        if isinstance(raw, str):
            raw = json.loads(raw)
        return SavedDeal(
            owner_key=d["owner_key"],
            deal_id=d["deal_id"],
            name=d["name"] or "",
            deal=DealInput.from_dict(raw or {}),
            created_at=d["created_at"],
            updated_at=d["updated_at"],
        )

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
