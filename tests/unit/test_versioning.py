"""Unit tests for the version history helpers."""

from datetime import datetime, timezone

import pytest

from app.core.exceptions import ValidationError
from app.domains.resumes.versioning import (
    AUTO_SAVE_NOTE,
    MANUAL_SAVE_NOTE,
    MAX_VERSIONS,
    VersionSnapshot,
    append_snapshot,
    is_valid_index,
    payloads_equal,
    resolve_note,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_payloads_equal_ignores_key_order() -> None:
    left = {"name": "Ada", "skills": ["math", "code"], "meta": {"x": 1, "y": 2}}
    right = {"meta": {"y": 2, "x": 1}, "skills": ["math", "code"], "name": "Ada"}

    assert payloads_equal(left, right)


def test_payloads_equal_is_order_sensitive_on_lists() -> None:
    assert not payloads_equal({"skills": ["math", "code"]}, {"skills": ["code", "math"]})


def test_payloads_equal_detects_missing_and_extra_keys() -> None:
    assert not payloads_equal({"a": 1}, {"a": 1, "b": None})
    assert not payloads_equal({"a": 1, "b": None}, {"a": 1})


def test_payloads_equal_does_not_confuse_bool_and_int() -> None:
    assert not payloads_equal({"flag": True}, {"flag": 1})
    assert not payloads_equal({"flag": 0}, {"flag": False})
    assert payloads_equal({"flag": True}, {"flag": True})


def test_payloads_equal_distinct_objects_with_same_structure() -> None:
    left = {"items": [{"title": "Engineer"}]}
    right = {"items": [{"title": "Engineer"}]}

    assert left is not right
    assert payloads_equal(left, right)


def test_payloads_equal_container_type_mismatch() -> None:
    assert not payloads_equal({"a": []}, {"a": {}})
    assert not payloads_equal({"a": "1"}, {"a": ["1"]})


def test_resolve_note() -> None:
    assert resolve_note(True) == MANUAL_SAVE_NOTE
    assert resolve_note("Before interview") == "Before interview"
    assert resolve_note(None) == AUTO_SAVE_NOTE
    assert resolve_note("") == AUTO_SAVE_NOTE
    assert resolve_note(False) == AUTO_SAVE_NOTE


def test_is_valid_index() -> None:
    assert is_valid_index(0, 3)
    assert is_valid_index(2, 3)
    assert not is_valid_index(3, 3)
    assert not is_valid_index(-1, 3)
    assert not is_valid_index(1.5, 3)
    assert not is_valid_index(True, 3)
    assert not is_valid_index("1", 3)
    assert not is_valid_index(0, 0)


def test_snapshot_capture_is_deep_copy() -> None:
    payload = {"jobs": [{"title": "Dev"}]}
    snapshot = VersionSnapshot.capture(payload, "note", T0)

    payload["jobs"][0]["title"] = "Manager"

    assert snapshot.data == {"jobs": [{"title": "Dev"}]}
    assert snapshot.created_at == T0


def test_snapshot_dict_roundtrip_keeps_timestamp() -> None:
    snapshot = VersionSnapshot.capture({"a": 1}, "Initial version", T0)

    restored = VersionSnapshot.from_dict(snapshot.to_dict())

    assert restored == snapshot


def test_append_snapshot_evicts_oldest_at_capacity() -> None:
    versions = [VersionSnapshot.capture({"n": n}, "note", T0) for n in range(MAX_VERSIONS)]

    evicted = append_snapshot(versions, VersionSnapshot.capture({"n": 99}, "note", T0))

    assert evicted.data == {"n": 0}
    assert len(versions) == MAX_VERSIONS
    assert [v.data["n"] for v in versions] == list(range(1, MAX_VERSIONS)) + [99]


def test_append_snapshot_below_capacity_keeps_everything() -> None:
    versions = [VersionSnapshot.capture({"n": 0}, "note", T0)]

    evicted = append_snapshot(versions, VersionSnapshot.capture({"n": 1}, "note", T0))

    assert evicted is None
    assert [v.data["n"] for v in versions] == [0, 1]


@pytest.mark.parametrize("raw", [{"data": {"a": 1}, "notes": "x"}, {"data": {}, "created_at": None, "notes": "x"}])
def test_snapshot_without_timestamp_is_rejected(raw) -> None:
    with pytest.raises(ValidationError):
        VersionSnapshot.from_dict(raw)
