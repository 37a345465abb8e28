"""
Tests for services/job_service.py - job CRUD and status workflow.
"""

import pytest

from jobboard.errors import InvalidJobError, JobNotFoundError, StorageError
from jobboard.models.job import JobFields, JobStatus
from jobboard.services.job_service import JobService


class TestCreate:
    """Test job creation."""

    def test_create_assigns_id_and_defaults(self, make_job):
        """Test that a new job gets id 1, status applied and empty optional fields."""
        job = make_job()

        assert job.id == 1
        assert job.status == JobStatus.APPLIED
        assert job.source == ""
        assert job.contact_person == ""
        assert job.applied_date == job.updated_at

    def test_create_keeps_explicit_status(self, make_job):
        """Test that an explicitly supplied status is kept."""
        job = make_job(status="interview")
        assert job.status == JobStatus.INTERVIEW

    def test_create_empty_status_defaults_to_applied(self, make_job):
        """Test that an empty status is treated as not supplied."""
        assert make_job(status="").status == JobStatus.APPLIED

    def test_create_rejects_unknown_status(self, service, store):
        """Test that an unknown status is rejected and nothing is stored."""
        with pytest.raises(InvalidJobError):
            service.create_job(JobFields(company="Acme", position="Engineer", status="ghosted"))
        assert store.load_jobs() == []

    @pytest.mark.parametrize("fields", [
        {"position": "Engineer"},
        {"company": "Acme"},
        {"company": "", "position": "Engineer"},
        {"company": "Acme", "position": ""},
        {},
    ])
    def test_create_requires_company_and_position(self, service, store, fields):
        """Test that missing company or position is rejected without appending."""
        with pytest.raises(InvalidJobError, match="Company and position are required"):
            service.create_job(JobFields(**fields))
        assert store.load_jobs() == []
        assert store.get_next_id() == 1

    def test_ids_increase_and_are_never_reused(self, service, make_job):
        """Test that deleting a middle job does not free its id."""
        first = make_job(company="A")
        middle = make_job(company="B")
        service.delete_job(middle.id)
        last = make_job(company="C")

        assert (first.id, middle.id, last.id) == (1, 2, 3)
        assert sorted(j.id for j in service.list_jobs()) == [1, 3]

    def test_counter_is_advanced_before_jobs_are_saved(self, service, store, monkeypatch):
        """Test that a failed save still burns the id."""
        def broken_save(jobs):
            raise StorageError("disk full")

        monkeypatch.setattr(store, "save_jobs", broken_save)
        with pytest.raises(StorageError):
            service.create_job(JobFields(company="Acme", position="Engineer"))

        assert store.get_next_id() == 2
        assert store.load_jobs() == []

    def test_counter_behind_existing_ids_is_skipped(self, service, store, make_job):
        """Test that a stale counter never hands out an id already in use."""
        make_job()
        make_job()
        store.save_next_id(1)

        assert make_job().id == 3


class TestRead:
    """Test listing and lookup."""

    def test_list_sorted_by_updated_at_desc(self, service, make_job):
        """Test that updating an older job moves it ahead of newer ones."""
        older = make_job(company="Older")
        newer = make_job(company="Newer")
        assert [j.id for j in service.list_jobs()] == [newer.id, older.id]

        service.patch_job(older.id, JobFields(notes="followed up"))

        assert [j.id for j in service.list_jobs()] == [older.id, newer.id]

    def test_list_empty(self, service):
        """Test listing an empty store."""
        assert service.list_jobs() == []

    def test_get_job(self, service, make_job):
        """Test fetching a job by id."""
        job = make_job(company="Acme")
        assert service.get_job(job.id).company == "Acme"

    def test_get_missing_job(self, service):
        """Test that an unknown id raises JobNotFoundError."""
        with pytest.raises(JobNotFoundError):
            service.get_job(42)


class TestReplace:
    """Test full replacement (PUT)."""

    def test_replace_resets_unsupplied_fields(self, service, make_job):
        """Test that fields missing from the body fall back to their defaults."""
        job = make_job(notes="referral", salary="100k", status="offer")

        replaced = service.replace_job(job.id, JobFields(company="Acme", position="Staff Engineer"))

        assert replaced.position == "Staff Engineer"
        assert replaced.notes == ""
        assert replaced.salary == ""
        assert replaced.status == JobStatus.APPLIED

    def test_replace_preserves_id_and_applied_date(self, service, make_job):
        """Test that id and appliedDate survive a replace while updatedAt moves."""
        job = make_job()

        replaced = service.replace_job(job.id, JobFields(company="Beta", position="Lead"))

        assert replaced.id == job.id
        assert replaced.applied_date == job.applied_date
        assert replaced.updated_at > job.updated_at
        assert service.get_job(job.id).company == "Beta"

    def test_replace_requires_company_and_position(self, service, make_job):
        """Test that a replace without required fields is rejected."""
        job = make_job()
        with pytest.raises(InvalidJobError):
            service.replace_job(job.id, JobFields(company="Acme"))
        assert service.get_job(job.id).position == "Engineer"

    def test_replace_missing_job(self, service):
        """Test that replacing an unknown id raises JobNotFoundError."""
        with pytest.raises(JobNotFoundError):
            service.replace_job(7, JobFields(company="Acme", position="Engineer"))


class TestPatch:
    """Test partial update (PATCH)."""

    def test_patch_merges_supplied_fields(self, service, make_job):
        """Test that only supplied fields change."""
        job = make_job(source="LinkedIn", notes="old")

        patched = service.patch_job(job.id, JobFields(notes="new"))

        assert patched.notes == "new"
        assert patched.source == "LinkedIn"
        assert patched.updated_at > job.updated_at

    def test_patch_empty_string_replaces(self, service, make_job):
        """Test that an empty string clears an optional field."""
        job = make_job(notes="something")
        assert service.patch_job(job.id, JobFields(notes="")).notes == ""

    def test_patch_null_leaves_field_unchanged(self, service, make_job):
        """Test that an explicit null is treated as not supplied."""
        job = make_job(notes="keep me")
        assert service.patch_job(job.id, JobFields(notes=None)).notes == "keep me"

    def test_patch_status(self, service, make_job):
        """Test that a valid status is applied through patch."""
        job = make_job()
        assert service.patch_job(job.id, JobFields(status="offer")).status == JobStatus.OFFER

    def test_patch_invalid_status_changes_nothing(self, service, make_job):
        """Test that an invalid status rejects the whole patch."""
        job = make_job(notes="before")

        with pytest.raises(InvalidJobError, match="Invalid status"):
            service.patch_job(job.id, JobFields(status="hired", notes="after"))

        stored = service.get_job(job.id)
        assert stored.status == JobStatus.APPLIED
        assert stored.notes == "before"
        assert stored.updated_at == job.updated_at

    def test_patch_cannot_blank_company(self, service, make_job):
        """Test that company and position cannot be cleared."""
        job = make_job()
        with pytest.raises(InvalidJobError):
            service.patch_job(job.id, JobFields(company=""))

    def test_empty_patch_does_not_touch(self, service, make_job):
        """Test that a patch with no fields leaves updatedAt alone."""
        job = make_job()
        assert service.patch_job(job.id, JobFields()).updated_at == job.updated_at

    def test_patch_missing_job(self, service):
        """Test that patching an unknown id raises JobNotFoundError."""
        with pytest.raises(JobNotFoundError):
            service.patch_job(3, JobFields(notes="x"))


class TestStatusUpdate:
    """Test the dedicated status update."""

    @pytest.mark.parametrize("status", ["applied", "inProgress", "interview", "offer", "done", "rejected"])
    def test_any_status_reachable_from_rejected(self, service, make_job, status):
        """Test that there is no transition graph or terminal state."""
        job = make_job(status="rejected")
        assert service.update_status(job.id, status).status.value == status

    def test_status_update_refreshes_updated_at(self, service, make_job):
        """Test that a status change refreshes updatedAt."""
        job = make_job()
        assert service.update_status(job.id, "interview").updated_at > job.updated_at

    @pytest.mark.parametrize("status", [None, "", "Applied", "hired"])
    def test_invalid_status(self, service, make_job, status):
        """Test that values outside the six statuses are rejected."""
        job = make_job()
        with pytest.raises(InvalidJobError):
            service.update_status(job.id, status)
        assert service.get_job(job.id).updated_at == job.updated_at

    def test_invalid_status_checked_before_lookup(self, service):
        """Test that validation happens before the id lookup."""
        with pytest.raises(InvalidJobError):
            service.update_status(99, "bogus")

    def test_status_update_missing_job(self, service):
        """Test that a valid status on an unknown id raises JobNotFoundError."""
        with pytest.raises(JobNotFoundError):
            service.update_status(99, "offer")


class TestDeleteAndStats:
    """Test deletion and stats."""

    def test_delete(self, service, make_job):
        """Test that delete removes the job permanently."""
        job = make_job()
        service.delete_job(job.id)
        with pytest.raises(JobNotFoundError):
            service.get_job(job.id)

    def test_delete_twice(self, service, make_job):
        """Test that a repeated delete reports not found."""
        job = make_job()
        service.delete_job(job.id)
        with pytest.raises(JobNotFoundError):
            service.delete_job(job.id)

    def test_delete_missing_leaves_collection(self, service, make_job):
        """Test that deleting an unknown id leaves the collection unchanged."""
        make_job()
        before = service.list_jobs()
        with pytest.raises(JobNotFoundError):
            service.delete_job(99)
        assert service.list_jobs() == before

    def test_stats_omit_empty_statuses(self, service, make_job):
        """Test counts per status without zero-filled entries."""
        make_job(status="applied")
        make_job(status="applied")
        make_job(status="offer")

        stats = service.stats()

        assert stats.total == 3
        assert stats.by_status == {"applied": 2, "offer": 1}

    def test_stats_empty(self, service):
        """Test stats on an empty store."""
        stats = service.stats()
        assert stats.total == 0
        assert stats.by_status == {}


def test_service_uses_the_store_it_is_given(store, clock):
    """Test that two services over one store see each other's writes."""
    writer = JobService(store)
    reader = JobService(store)
    writer.create_job(JobFields(company="Acme", position="Engineer"))
    assert len(reader.list_jobs()) == 1


def test_models_package_exports_what_callers_import():
    """Test that the models package re-exports every public name of models.job."""
    import jobboard.models as models
    from jobboard.models import job as job_module

    for name in models.__all__:
        assert getattr(models, name) is getattr(job_module, name)
    assert models.EDITABLE_FIELDS == job_module.EDITABLE_FIELDS
