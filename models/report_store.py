"""
Saved reports, one JSON file per report.

Each record carries its owner. Every operation is scoped to the caller's
owner id: another owner's report is never returned, overwritten or
deleted. Files are written with camelCase keys, the same shape reports
have everywhere else.
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from core.errors import OwnershipViolation, PersistenceFailure
from models.schemas import Report, StoredReport

logger = logging.getLogger(__name__)


def _file_key(report_id: str) -> str:
    # One file per distinct id, whatever characters the id contains
    return hashlib.sha256(report_id.encode("utf-8")).hexdigest()


class ReportStore:
    """File-backed report persistence."""

    def __init__(self, folder: Path | None = None):
        if folder is None:
            from config.settings import REPORTS_FOLDER
            folder = REPORTS_FOLDER
        self.folder = Path(folder)

    def _path(self, report_id: str) -> Path:
        return self.folder / f"report_{_file_key(report_id)}.json"

    def _read(self, path: Path) -> StoredReport:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return StoredReport.model_validate(data)
        except OSError as e:
            raise PersistenceFailure(f"Could not read {path.name}: {e}") from e
        except (json.JSONDecodeError, ValidationError) as e:
            raise PersistenceFailure(f"Corrupt report file {path.name}: {e}") from e

    def _load(self, report_id: str) -> StoredReport | None:
        path = self._path(report_id)
        if not path.exists():
            return None
        record = self._read(path)
        if record.id != report_id:
            raise PersistenceFailure(f"{path.name} holds report {record.id!r}, expected {report_id!r}")
        return record

    def save(self, report: Report, owner_id: str) -> StoredReport:
        """
        Insert or update a report for owner_id.

        An update keeps the original created_at. Raises OwnershipViolation
        when the id already belongs to someone else.
        """
        existing = self._load(report.id)
        if existing is not None and existing.owner_id != owner_id:
            logger.warning("Refusing to overwrite report %s for another owner", report.id)
            raise OwnershipViolation(report.id)

        record = StoredReport(
            id=report.id,
            owner_id=owner_id,
            date=report.date,
            created_at=existing.created_at if existing else datetime.now(),
            project_details=report.project_details,
            analysis=report.analysis,
        )
        path = self._path(report.id)
        try:
            self.folder.mkdir(parents=True, exist_ok=True)
            path.write_text(record.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        except OSError as e:
            raise PersistenceFailure(f"Could not save report {report.id}: {e}") from e

        logger.info("%s report %s for %s", "Updated" if existing else "Saved", report.id, owner_id)
        return record

    def list_for_owner(self, owner_id: str) -> list[StoredReport]:
        """All reports owned by owner_id, oldest first. Unreadable files are skipped."""
        if not self.folder.exists():
            return []
        try:
            paths = sorted(self.folder.glob("report_*.json"))
        except OSError as e:
            raise PersistenceFailure(f"Could not list {self.folder}: {e}") from e

        records = []
        for path in paths:
            try:
                record = self._read(path)
            except PersistenceFailure as e:
                logger.warning("Skipping saved report: %s", e)
                continue
            if record.owner_id == owner_id:
                records.append(record)
        records.sort(key=lambda r: r.created_at)
        return records

    def get(self, report_id: str, owner_id: str) -> StoredReport | None:
        record = self._load(report_id)
        if record is None:
            return None
        if record.owner_id != owner_id:
            raise OwnershipViolation(report_id)
        return record

    def delete(self, report_id: str, owner_id: str) -> bool:
        """Delete a report. False when it does not exist."""
        record = self._load(report_id)
        if record is None:
            logger.debug("Delete of unknown report %s ignored", report_id)
            return False
        if record.owner_id != owner_id:
            raise OwnershipViolation(report_id)
        try:
            self._path(report_id).unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistenceFailure(f"Could not delete report {report_id}: {e}") from e
        logger.info("Deleted report %s for %s", report_id, owner_id)
        return True
