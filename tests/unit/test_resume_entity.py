"""Unit tests for the Resume entity and its version history."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import NotFoundError
from app.domains.resumes.entities import Resume, generate_slug
from app.domains.resumes.versioning import MAX_VERSIONS

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


def history(resume: Resume) -> list:
    return [(v.data, v.notes) for v in resume.versions]


def new_resume(data=None) -> Resume:
    return Resume.create_resume(owner_id=uuid.uuid4(), data=data or {"a": 1}, now=T0)


def test_create_records_initial_version() -> None:
    resume = new_resume({"a": 1})

    assert history(resume) == [({"a": 1}, "Initial version")]
    assert resume.versions[0].created_at == T0
    assert resume.last_modified == T0
    assert resume.name == "My Resume"
    assert resume.template == "modern"
    assert resume.template_settings == {"layout": "standard"}


def test_create_copies_payload() -> None:
    payload = {"a": 1}
    resume = new_resume(payload)

    payload["a"] = 2

    assert resume.versions[0].data == {"a": 1}


def test_save_appends_when_data_changes() -> None:
    resume = new_resume({"a": 1})

    resume.save({"a": 2}, now=at(1))

    assert history(resume) == [({"a": 1}, "Initial version"), ({"a": 2}, "Auto-saved version")]
    assert resume.data == {"a": 2}
    assert resume.last_modified == at(1)


def test_unchanged_save_does_not_append_but_touches() -> None:
    resume = new_resume({"a": 1})
    resume.save({"a": 2}, now=at(1))

    resume.save({"a": 2}, now=at(2))

    assert len(resume.versions) == 2
    assert resume.last_modified == at(2)


def test_save_compares_structurally_not_by_identity() -> None:
    resume = new_resume({"x": 1, "y": [1, 2]})

    resume.save({"y": [1, 2], "x": 1}, now=at(1))

    assert len(resume.versions) == 1


def test_save_with_explicit_notes() -> None:
    resume = new_resume({"a": 1})

    resume.save({"a": 2}, note=True, now=at(1))
    resume.save({"a": 3}, note="Tailored for ACME", now=at(2))

    assert [notes for _, notes in history(resume)] == [
        "Initial version",
        "Manual save",
        "Tailored for ACME",
    ]


def test_explicit_note_does_not_force_snapshot_for_unchanged_data() -> None:
    resume = new_resume({"a": 1})

    resume.save({"a": 1}, note=True, now=at(1))

    assert history(resume) == [({"a": 1}, "Initial version")]


def test_save_on_empty_history_appends() -> None:
    resume = Resume(uuid=uuid.uuid4(), owner_id=uuid.uuid4(), data={"a": 1}, versions=[])

    resume.save({"a": 1}, now=at(1))

    assert history(resume) == [({"a": 1}, "Auto-saved version")]


def test_mutating_caller_payload_after_save_keeps_snapshot() -> None:
    resume = new_resume({"a": 1})
    payload = {"jobs": [{"title": "Dev"}]}

    resume.save(payload, now=at(1))
    payload["jobs"][0]["title"] = "CTO"
    payload["jobs"].append({"title": "Intern"})

    assert resume.versions[-1].data == {"jobs": [{"title": "Dev"}]}


def test_capacity_is_bounded_with_fifo_eviction() -> None:
    resume = new_resume({"n": 0})

    for n in range(1, MAX_VERSIONS + 1):
        resume.save({"n": n}, now=at(n))

    assert len(resume.versions) == MAX_VERSIONS
    assert [v.data["n"] for v in resume.versions] == list(range(1, MAX_VERSIONS + 1))
    assert "Initial version" not in [v.notes for v in resume.versions]

    resume.save({"n": 11}, now=at(11))

    assert len(resume.versions) == MAX_VERSIONS
    assert [v.data["n"] for v in resume.versions] == list(range(2, 12))


def test_list_versions_returns_metadata_only() -> None:
    resume = new_resume({"a": 1})
    resume.save({"a": 2}, note="Second", now=at(1))

    assert resume.list_versions() == [
        {"index": 0, "created_at": T0, "notes": "Initial version"},
        {"index": 1, "created_at": at(1), "notes": "Second"},
    ]


def test_list_versions_indices_shift_after_eviction() -> None:
    resume = new_resume({"n": 0})
    for n in range(1, MAX_VERSIONS + 1):
        resume.save({"n": n}, note=f"v{n}", now=at(n))

    listing = resume.list_versions()

    assert listing[0] == {"index": 0, "created_at": at(1), "notes": "v1"}
    assert [item["index"] for item in listing] == list(range(MAX_VERSIONS))


def test_get_version_returns_snapshot() -> None:
    resume = new_resume({"a": 1})
    resume.save({"a": 2}, now=at(1))

    assert resume.get_version(1).data == {"a": 2}


@pytest.mark.parametrize("index", [-1, 2, 1.5, True, "0", None])
def test_get_version_out_of_range_fails_without_changes(index) -> None:
    resume = new_resume({"a": 1})
    resume.save({"a": 2}, now=at(1))
    before = history(resume)

    with pytest.raises(NotFoundError):
        resume.get_version(index)

    assert history(resume) == before
    assert resume.data == {"a": 2}


def test_get_version_on_empty_history() -> None:
    resume = Resume(uuid=uuid.uuid4(), owner_id=uuid.uuid4(), data={}, versions=[])

    with pytest.raises(NotFoundError):
        resume.get_version(0)


def test_restore_scenario_literal_history() -> None:
    resume = new_resume({"a": 1})
    resume.save({"a": 2}, now=at(1))
    resume.save({"a": 2}, now=at(2))
    assert len(resume.versions) == 2

    resume.restore_version(0, now=at(3))

    assert resume.data == {"a": 1}
    assert resume.last_modified == at(3)
    assert history(resume) == [
        ({"a": 1}, "Initial version"),
        ({"a": 2}, "Auto-saved version"),
        ({"a": 2}, "Auto-saved before version restore"),
    ]
    assert resume.versions[-1].created_at == at(3)


def test_restore_appends_exactly_one_safety_snapshot() -> None:
    resume = new_resume({"v": 0})
    resume.save({"v": 1}, now=at(1))
    resume.save({"v": 2}, now=at(2))
    resume.data = {"live": True}

    resume.restore_version(0, now=at(3))

    assert resume.data == {"v": 0}
    assert history(resume) == [
        ({"v": 0}, "Initial version"),
        ({"v": 1}, "Auto-saved version"),
        ({"v": 2}, "Auto-saved version"),
        ({"live": True}, "Auto-saved before version restore"),
    ]


def test_restore_snapshots_even_when_data_matches_target() -> None:
    resume = new_resume({"a": 1})

    resume.restore_version(0, now=at(1))

    assert history(resume) == [
        ({"a": 1}, "Initial version"),
        ({"a": 1}, "Auto-saved before version restore"),
    ]


def test_restore_at_capacity_evicts_target_but_restores_its_data() -> None:
    resume = new_resume({"n": 0})
    for n in range(1, MAX_VERSIONS):
        resume.save({"n": n}, now=at(n))
    assert len(resume.versions) == MAX_VERSIONS

    resume.restore_version(0, now=at(20))

    assert resume.data == {"n": 0}
    assert len(resume.versions) == MAX_VERSIONS
    assert resume.versions[0].data == {"n": 1}
    assert resume.versions[-1].notes == "Auto-saved before version restore"
    assert resume.versions[-1].data == {"n": MAX_VERSIONS - 1}


def test_restored_data_is_independent_of_snapshot() -> None:
    resume = new_resume({"jobs": ["Dev"]})
    resume.save({"jobs": ["Lead"]}, now=at(1))

    resume.restore_version(0, now=at(2))
    resume.data["jobs"].append("CTO")

    assert resume.versions[0].data == {"jobs": ["Dev"]}


def test_restore_invalid_index_leaves_resume_untouched() -> None:
    resume = new_resume({"a": 1})

    with pytest.raises(NotFoundError):
        resume.restore_version(5, now=at(1))

    assert history(resume) == [({"a": 1}, "Initial version")]
    assert resume.last_modified == T0


def test_set_public_generates_slug_once() -> None:
    resume = Resume.create_resume(owner_id=uuid.uuid4(), data={}, name="Senior Dev -- CV!")

    resume.set_public(True)
    slug = resume.slug
    resume.set_public(False)
    resume.set_public(True)

    assert slug.startswith("senior-dev-cv-")
    assert resume.slug == slug


def test_generate_slug_format() -> None:
    slug = generate_slug("  My Résumé 2026 ")

    base, suffix = slug.rsplit("-", 1)
    assert base == "my-r-sum-2026"
    assert len(suffix) == 6
    assert suffix.isalnum() and suffix == suffix.lower()


def test_update_template_settings_merges() -> None:
    resume = new_resume()

    resume.update_template_settings({"font_family": "Inter"})
    merged = resume.update_template_settings({"layout": "compact", "accent": "#00f"})

    assert merged == {"layout": "compact", "font_family": "Inter", "accent": "#00f"}
