"""
train_plan/plan_store.py — Single-slot draft persistence
========================================================
Holds the current plan in memory and mirrors it into one SQLite row, so
reopening the app restores the last generated plan.

Design decisions
----------------
- **One fixed key** (``trainingPlan``) — every ``set`` overwrites it; there
  is no history and no multi-user separation.
- **Cleared at submission start** — the generation controller calls
  ``clear`` before issuing a request, so a failed attempt can never show a
  stale plan next to a fresh error.
- **Memory first** — ``get`` answers from memory; the database is read
  only by ``load`` at startup.

Schema
------
  plan_slot(key TEXT PRIMARY KEY, plan_text TEXT NOT NULL, updated_at TEXT)
"""

from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Optional

PLAN_SLOT_KEY = "trainingPlan"


class PlanStore:
    """In-memory current plan mirrored into a persisted single slot."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path)
        self._plan: Optional[str] = None
        self._init_db()

    # ── Connection helpers ───────────────────────────────────────────────────

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._get_conn()) as conn:
            conn.execute("""
            CREATE TABLE IF NOT EXISTS plan_slot (
                key        TEXT PRIMARY KEY,
                plan_text  TEXT NOT NULL,
                updated_at TEXT DEFAULT (datetime('now'))
            )
            """)
            conn.commit()

    # ── Public API ───────────────────────────────────────────────────────────

    def load(self) -> Optional[str]:
        """Restore the persisted plan into memory and return it."""
        with closing(self._get_conn()) as conn:
            row = conn.execute(
                "SELECT plan_text FROM plan_slot WHERE key = ?", (PLAN_SLOT_KEY,),
            ).fetchone()
        self._plan = row["plan_text"] if row else None
        return self._plan

    def get(self) -> Optional[str]:
        return self._plan

    def set(self, plan: str) -> None:
        with closing(self._get_conn()) as conn:
            conn.execute(
                """INSERT INTO plan_slot (key, plan_text, updated_at)
                   VALUES (?, ?, datetime('now'))
                   ON CONFLICT(key) DO UPDATE SET
                       plan_text  = excluded.plan_text,
                       updated_at = excluded.updated_at""",
                (PLAN_SLOT_KEY, plan),
            )
            conn.commit()
        self._plan = plan

    def clear(self) -> None:
        with closing(self._get_conn()) as conn:
            conn.execute("DELETE FROM plan_slot WHERE key = ?", (PLAN_SLOT_KEY,))
            conn.commit()
        self._plan = None
