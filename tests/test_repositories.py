# =============================================================================
# tests/test_repositories.py - Profile and Project Repository Tests
# =============================================================================
# Unit tests for the repositories on top of a real ConfigStore:
# - Profile: id stability, full replace, image resolution
# - Projects: create/get/list/update/delete, ordering, partial merge
#
# Run with: pytest tests/test_repositories.py -v
# =============================================================================

import pytest

from app.exceptions import InvalidArgumentError, ProjectNotFoundError
from core.models import ProfileInput, ProjectCreate, ProjectUpdate
from tests.conftest import run


# =============================================================================
# Profile Repository Tests
# =============================================================================

class TestProfileRepository:
    """Tests for ProfileRepository."""

    def test_get_returns_none_before_first_write(self, profiles):
        assert run(profiles.get()) is None

    def test_id_is_stable_across_upserts(self, profiles):
        """The profile keeps the id minted on its first write."""
        # Arrange / Act
        first = run(profiles.upsert(ProfileInput(name="Ada")))
        second = run(profiles.upsert(ProfileInput(name="Ada Lovelace")))

        # Assert
        assert first.id
        assert second.id == first.id
        assert run(profiles.get()).name == "Ada Lovelace"

    def test_upsert_is_full_replace(self, profiles):
        """Fields omitted from the input are cleared."""
        run(profiles.upsert(ProfileInput(
            name="Ada",
            bio="Analyst",
            github="https://github.com/ada",
        )))

        updated = run(profiles.upsert(ProfileInput(name="Ada")))

        assert updated.bio == ""
        assert updated.github is None

    def test_existing_image_is_kept_without_new_source(self, profiles):
        run(profiles.upsert(ProfileInput(name="Ada"), uploaded_path="/data/uploads/a.png"))

        updated = run(profiles.upsert(ProfileInput(name="Ada")))

        assert updated.profile_image == "/data/uploads/a.png"

    def test_explicit_url_beats_upload_and_existing(self, profiles):
        run(profiles.upsert(ProfileInput(name="Ada"), uploaded_path="/data/uploads/a.png"))

        updated = run(profiles.upsert(
            ProfileInput(name="Ada"),
            explicit_url="https://cdn.example.com/ada.png",
            uploaded_path="/data/uploads/b.png",
        ))

        assert updated.profile_image == "https://cdn.example.com/ada.png"

    def test_non_http_image_url_is_rejected_and_nothing_written(self, profiles, store):
        run(profiles.upsert(ProfileInput(name="Ada")))
        before = store.config_path.read_bytes()

        with pytest.raises(InvalidArgumentError) as exc_info:
            run(profiles.upsert(ProfileInput(name="Eve"), explicit_url="javascript:alert(1)"))

        assert exc_info.value.details["field"] == "profileImageUrl"
        assert store.config_path.read_bytes() == before

    def test_invalid_social_link_is_rejected(self, profiles):
        with pytest.raises(InvalidArgumentError) as exc_info:
            run(profiles.upsert(ProfileInput(name="Ada", linkedin="linkedin.com/in/ada")))

        assert exc_info.value.details["field"] == "linkedin"
        assert run(profiles.get()) is None


# =============================================================================
# Project Repository Tests
# =============================================================================

class TestProjectCreate:
    """Tests for ProjectRepository.create and get."""

    def test_create_then_get_round_trip(self, projects):
        created = run(projects.create(ProjectCreate(
            title="Site",
            description="My site",
            tags="python, web,,python",
            live_url="https://example.com",
        )))

        fetched = run(projects.get(created.id))

        assert fetched == created
        assert fetched.tags == ["python", "web", "python"]
        assert fetched.order == 0
        assert fetched.long_description is None

    def test_create_accepts_camel_case_payload(self, projects):
        payload = ProjectCreate.model_validate({
            "title": "Site",
            "description": "My site",
            "longDescription": "Long",
            "githubUrl": "https://github.com/me/site",
            "tags": ["a", "b"],
        })

        created = run(projects.create(payload))

        assert created.long_description == "Long"
        assert created.github_url == "https://github.com/me/site"
        assert created.tags == ["a", "b"]

    def test_create_assigns_unique_ids(self, projects):
        a = run(projects.create(ProjectCreate(title="A", description="a")))
        b = run(projects.create(ProjectCreate(title="B", description="b")))

        assert a.id != b.id

    @pytest.mark.parametrize("order,expected", [
        ("2.9", 2),
        (3.99, 3),
        ("0", 0),
        (" 7 ", 7),
        ("", 0),
        (None, 0),
    ])
    def test_create_order_is_floored(self, projects, order, expected):
        created = run(projects.create(ProjectCreate(title="A", description="a", order=order)))

        assert created.order == expected

    @pytest.mark.parametrize("order", [-1, "-0.5", "NaN", "inf", "abc"])
    def test_create_rejects_invalid_order(self, projects, store, order):
        with pytest.raises(InvalidArgumentError) as exc_info:
            run(projects.create(ProjectCreate(title="A", description="a", order=order)))

        assert exc_info.value.details["field"] == "order"
        assert run(projects.list()) == []

    def test_create_rejects_non_http_link(self, projects):
        with pytest.raises(InvalidArgumentError) as exc_info:
            run(projects.create(ProjectCreate(
                title="A", description="a", github_url="ftp://example.com/repo",
            )))

        assert exc_info.value.details["field"] == "githubUrl"

    def test_create_with_both_image_sources_is_rejected(self, projects):
        with pytest.raises(InvalidArgumentError):
            run(projects.create(ProjectCreate(
                title="A",
                description="a",
                image="https://example.com/a.png",
                image_data="data:image/png;base64,AAAA",
            )))

    def test_get_unknown_id_returns_none(self, projects):
        assert run(projects.get("does-not-exist")) is None


class TestProjectList:
    """Tests for ProjectRepository.list ordering."""

    def test_list_sorts_by_order_with_stable_ties(self, projects):
        # Arrange: Created in A, B, C order
        run(projects.create(ProjectCreate(title="A", description="a", order=2)))
        run(projects.create(ProjectCreate(title="B", description="b", order=1)))
        run(projects.create(ProjectCreate(title="C", description="c", order=1)))

        # Act
        listed = run(projects.list())

        # Assert: Sorted by order; B and C keep creation order
        assert [p.title for p in listed] == ["B", "C", "A"]

    def test_list_does_not_reorder_storage(self, projects, store):
        run(projects.create(ProjectCreate(title="A", description="a", order=5)))
        run(projects.create(ProjectCreate(title="B", description="b", order=0)))

        run(projects.list())

        document = run(store.load())
        assert [p.title for p in document.projects] == ["A", "B"]


class TestProjectUpdate:
    """Tests for ProjectRepository.update partial merges."""

    @pytest.fixture
    def existing(self, projects):
        return run(projects.create(ProjectCreate(
            title="Site",
            description="My site",
            tags=["a"],
            order=4,
            image_data="data:image/png;base64,AAAA",
        )))

    def test_update_changes_only_present_fields(self, projects, existing):
        updated = run(projects.update(existing.id, ProjectUpdate(title="New title")))

        assert updated.title == "New title"
        assert updated.description == "My site"
        assert updated.tags == ["a"]
        assert updated.order == 4
        assert run(projects.get(existing.id)) == updated

    def test_blank_order_is_ignored(self, projects, existing):
        updated = run(projects.update(existing.id, ProjectUpdate(order="")))

        assert updated.order == 4

    def test_order_string_is_floored(self, projects, existing):
        updated = run(projects.update(existing.id, ProjectUpdate(order="2.9")))

        assert updated.order == 2

    def test_negative_order_is_rejected(self, projects, existing):
        with pytest.raises(InvalidArgumentError):
            run(projects.update(existing.id, ProjectUpdate(order=-1)))

        assert run(projects.get(existing.id)).order == 4

    def test_blank_title_is_rejected(self, projects, existing):
        with pytest.raises(InvalidArgumentError) as exc_info:
            run(projects.update(existing.id, ProjectUpdate(title="   ")))

        assert exc_info.value.details["field"] == "title"

    def test_tags_string_replaces_tags(self, projects, existing):
        updated = run(projects.update(existing.id, ProjectUpdate(tags="x, y")))

        assert updated.tags == ["x", "y"]

    def test_setting_image_url_clears_image_data(self, projects, existing):
        updated = run(projects.update(existing.id, ProjectUpdate(image="https://example.com/a.png")))

        assert updated.image == "https://example.com/a.png"
        assert updated.image_data is None

    def test_clearing_optional_field_with_empty_string(self, projects, existing):
        updated = run(projects.update(existing.id, ProjectUpdate(image_data="")))

        assert updated.image_data is None

    def test_update_unknown_project_raises(self, projects):
        with pytest.raises(ProjectNotFoundError):
            run(projects.update("missing", ProjectUpdate(title="x")))


class TestProjectUpdateChanges:
    """Tests for ProjectUpdate.changes, the merge set applied by update."""

    def test_only_present_fields_are_returned(self):
        fields = ProjectUpdate(title="x", tags="a, b")

        assert fields.changes() == {"title": "x", "tags": ["a", "b"]}

    def test_empty_update_has_no_changes(self):
        assert ProjectUpdate().changes() == {}

    def test_blank_order_is_omitted(self):
        assert ProjectUpdate(order=None).changes() == {}
        assert ProjectUpdate(order="").changes() == {}

    def test_blank_optional_fields_are_cleared(self):
        changes = ProjectUpdate(long_description="", live_url="").changes()

        assert changes == {"long_description": None, "live_url": None}


class TestProjectDelete:
    """Tests for ProjectRepository.delete."""

    def test_delete_then_get_returns_none(self, projects):
        created = run(projects.create(ProjectCreate(title="A", description="a")))

        run(projects.delete(created.id))

        assert run(projects.get(created.id)) is None
        assert run(projects.list()) == []

    def test_delete_unknown_project_raises(self, projects):
        with pytest.raises(ProjectNotFoundError) as exc_info:
            run(projects.delete("missing"))

        assert exc_info.value.status_code == 404
