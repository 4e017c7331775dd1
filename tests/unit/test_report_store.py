"""
Unit tests for ReportStore.

Covers:
- Insert, update (created_at kept) and camelCase file format
- Owner scoping on save, get, list and delete
- Ordering by creation time
- Corrupt files and unwritable folders
- One file per distinct id
"""

from __future__ import annotations

import json
from datetime import datetime

import pytest

from core.errors import OwnershipViolation, PersistenceFailure
from models.report_store import ReportStore
from models.schemas import Analysis, ContractType, Issue, OrganizationRole, ProjectDetails, Report, StoredReport


def _report(report_id: str = "1700000000000", name: str = "Riverside") -> Report:
    return Report(
        id=report_id,
        date=datetime(2025, 3, 7, 10, 0),
        project_details=ProjectDetails(
            project_name=name,
            contract_type=ContractType.NEC4_ECC,
            organization_role=OrganizationRole.CLIENT_EMPLOYER,
            issues=[Issue(description="Delay to completion", actions_taken="")],
        ),
        analysis=[Analysis(issue="Delay to completion", relevant_clauses=["Clause 61.3"])],
    )


def _write_record(store: ReportStore, report_id: str, owner: str, created_at: datetime) -> None:
    record = StoredReport(
        id=report_id,
        owner_id=owner,
        date=datetime(2025, 1, 1),
        created_at=created_at,
        project_details=_report(report_id).project_details,
    )
    store.folder.mkdir(parents=True, exist_ok=True)
    store._path(report_id).write_text(record.model_dump_json(by_alias=True))


# =============================================================================
# Save / get
# =============================================================================

def test_save_and_get(tmp_path):
    store = ReportStore(tmp_path / "reports")
    saved = store.save(_report(), "user-a")

    loaded = store.get("1700000000000", "user-a")
    assert loaded is not None
    assert loaded.owner_id == "user-a"
    assert loaded.to_report() == _report()
    assert loaded.created_at == saved.created_at


def test_saved_file_uses_camel_case(tmp_path):
    store = ReportStore(tmp_path)
    store.save(_report(), "user-a")

    data = json.loads(store._path("1700000000000").read_text())
    assert data["ownerId"] == "user-a"
    assert data["projectDetails"]["projectName"] == "Riverside"
    assert data["projectDetails"]["contractType"] == "NEC4 Engineering and Construction Contract (ECC)"
    assert data["analysis"][0]["relevantClauses"] == ["Clause 61.3"]
    assert "createdAt" in data


def test_update_keeps_created_at(tmp_path):
    store = ReportStore(tmp_path)
    first = store.save(_report(name="Old name"), "user-a")
    second = store.save(_report(name="New name"), "user-a")

    assert second.created_at == first.created_at
    assert store.get("1700000000000", "user-a").project_details.project_name == "New name"
    assert len(store.list_for_owner("user-a")) == 1


def test_get_missing_returns_none(tmp_path):
    assert ReportStore(tmp_path).get("nope", "user-a") is None


# =============================================================================
# Ownership
# =============================================================================

def test_save_over_another_owner_is_refused(tmp_path):
    store = ReportStore(tmp_path)
    store.save(_report(name="Mine"), "user-a")

    with pytest.raises(OwnershipViolation):
        store.save(_report(name="Theirs"), "user-b")
    assert store.get("1700000000000", "user-a").project_details.project_name == "Mine"


def test_get_another_owners_report_raises(tmp_path):
    store = ReportStore(tmp_path)
    store.save(_report(), "user-a")
    with pytest.raises(OwnershipViolation):
        store.get("1700000000000", "user-b")


def test_delete(tmp_path):
    store = ReportStore(tmp_path)
    store.save(_report(), "user-a")

    with pytest.raises(OwnershipViolation):
        store.delete("1700000000000", "user-b")
    assert store.delete("1700000000000", "user-a") is True
    assert store.get("1700000000000", "user-a") is None
    assert store.delete("1700000000000", "user-a") is False


def test_list_is_scoped_and_ordered(tmp_path):
    store = ReportStore(tmp_path)
    _write_record(store, "a", "user-a", datetime(2025, 3, 2))
    _write_record(store, "b", "user-a", datetime(2025, 3, 1))
    _write_record(store, "c", "user-b", datetime(2025, 3, 3))

    assert [r.id for r in store.list_for_owner("user-a")] == ["b", "a"]
    assert [r.id for r in store.list_for_owner("user-b")] == ["c"]
    assert store.list_for_owner("user-c") == []


def test_list_missing_folder(tmp_path):
    assert ReportStore(tmp_path / "never-created").list_for_owner("user-a") == []


# =============================================================================
# Failures
# =============================================================================

def test_corrupt_file_skipped_in_list_but_raised_on_get(tmp_path):
    store = ReportStore(tmp_path)
    store.save(_report(), "user-a")
    store._path("broken").write_text("{not json")

    assert [r.id for r in store.list_for_owner("user-a")] == ["1700000000000"]
    with pytest.raises(PersistenceFailure):
        store.get("broken", "user-a")


def test_unwritable_folder_raises_persistence_failure(tmp_path):
    blocker = tmp_path / "reports"
    blocker.write_text("a file, not a folder")
    with pytest.raises(PersistenceFailure):
        ReportStore(blocker).save(_report(), "user-a")


def test_ids_never_escape_the_folder(tmp_path):
    store = ReportStore(tmp_path / "reports")
    store.save(_report("../escape"), "user-a")
    assert [p.parent for p in tmp_path.rglob("*.json")] == [tmp_path / "reports"]
    assert store.get("../escape", "user-a").id == "../escape"


def test_similar_ids_are_stored_separately(tmp_path):
    store = ReportStore(tmp_path)
    store.save(_report("a.b", name="Dotted"), "user-a")
    store.save(_report("a_b", name="Underscored"), "user-a")
    store.save(_report("a/b", name="Slashed"), "user-b")

    assert sorted(r.id for r in store.list_for_owner("user-a")) == ["a.b", "a_b"]
    assert store.get("a.b", "user-a").project_details.project_name == "Dotted"
    assert store.get("a_b", "user-a").project_details.project_name == "Underscored"
    assert store.get("a/b", "user-b").id == "a/b"


def test_long_ids_are_not_truncated_together(tmp_path):
    store = ReportStore(tmp_path)
    prefix = "x" * 120
    store.save(_report(prefix + "1"), "user-a")
    store.save(_report(prefix + "2"), "user-a")
    assert len(store.list_for_owner("user-a")) == 2


def test_file_holding_another_id_is_rejected(tmp_path):
    store = ReportStore(tmp_path)
    store.save(_report("real"), "user-a")
    store._path("real").rename(store._path("other"))
    with pytest.raises(PersistenceFailure):
        store.get("other", "user-a")
