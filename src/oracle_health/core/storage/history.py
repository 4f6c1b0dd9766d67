"""Health history repository — persists completed health checks.

Vitals and the AI analysis are sealed with ``PayloadCipher``; BMI and the
three risk scores stay in clear columns for progress charts.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from oracle_health.core.storage.database import HealthDatabase
from oracle_health.core.storage.encryption import EncryptionError, PayloadCipher
from oracle_health.domains.health.domain_logic.risk_models import (
    CARDIOVASCULAR,
    DIABETES,
    HYPERTENSION,
    HealthRecord,
    RiskPrediction,
    VitalsSnapshot,
)

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when a stored record cannot be read back."""


class HealthHistoryRepository:
    """CRUD repository for encrypted health records.

    Usage::

        repo = HealthHistoryRepository(db, cipher)
        record_id = repo.save_record(record)
        recent = repo.list_records(limit=10)
    """

    def __init__(self, database: HealthDatabase, cipher: PayloadCipher) -> None:
        self._db = database
        self._cipher = cipher

    def save_record(self, record: HealthRecord) -> str:
        """Persist a record; an empty ``record.id`` gets a UUID.

        Returns:
            The record ID.
        """
        conn = self._db.connection
        record_id = record.id or str(uuid.uuid4())
        recorded_at = record.date or datetime.now(timezone.utc).isoformat()

        analysis = {
            "predictions": [p.to_dict() for p in record.predictions],
            "recommendations": record.recommendations,
            "recommendations_fallback": record.recommendations_fallback,
        }
        conn.execute(
            """INSERT INTO health_records (
                id, recorded_at, vitals_enc, analysis_enc,
                bmi, diabetes_score, cardiovascular_score, hypertension_score
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                record_id,
                recorded_at,
                self._cipher.seal(record.vitals.to_dict()),
                self._cipher.seal(analysis),
                record.bmi,
                record.score_for(DIABETES),
                record.score_for(CARDIOVASCULAR),
                record.score_for(HYPERTENSION),
            ),
        )
        conn.commit()
        record.id = record_id
        record.date = recorded_at
        logger.info("Saved health record %s", record_id)
        return record_id

    def get_record(self, record_id: str) -> HealthRecord | None:
        row = self._db.connection.execute(
            "SELECT * FROM health_records WHERE id = ?", (record_id,)
        ).fetchone()
        return self._row_to_record(row) if row else None

    def list_records(self, limit: int = 10) -> list[HealthRecord]:
        """The most recent ``limit`` records, oldest first (chart order)."""
        rows = self._db.connection.execute(
            "SELECT * FROM health_records ORDER BY recorded_at DESC LIMIT ?", (limit,)
        ).fetchall()
        return [self._row_to_record(row) for row in reversed(rows)]

    def get_score_history(self, limit: int = 10) -> list[dict[str, Any]]:
        """Clear-column history (no decryption), oldest first."""
        rows = self._db.connection.execute(
            """SELECT recorded_at, bmi, diabetes_score, cardiovascular_score, hypertension_score
               FROM health_records ORDER BY recorded_at DESC LIMIT ?""",
            (limit,),
        ).fetchall()
        return [dict(row) for row in reversed(rows)]

    def count_records(self) -> int:
        row = self._db.connection.execute("SELECT COUNT(*) FROM health_records").fetchone()
        return row[0]

    def delete_all(self) -> int:
        """Delete every record. Returns the number removed."""
        conn = self._db.connection
        count = self.count_records()
        conn.execute("DELETE FROM health_records")
        conn.commit()
        logger.info("Deleted %d health records", count)
        return count

    def _row_to_record(self, row: Any) -> HealthRecord:
        try:
            vitals = self._cipher.open(row["vitals_enc"])
            analysis = self._cipher.open(row["analysis_enc"])
        except EncryptionError as exc:
            raise RepositoryError(f"Cannot decrypt health record {row['id']}: {exc}") from exc

        return HealthRecord(
            id=row["id"],
            date=row["recorded_at"],
            vitals=VitalsSnapshot.from_dict(vitals),
            bmi=row["bmi"] or 0.0,
            predictions=[RiskPrediction.from_dict(p) for p in analysis.get("predictions", [])],
            recommendations=analysis.get("recommendations", ""),
            recommendations_fallback=analysis.get("recommendations_fallback", False),
        )
