"""Tests for task_db.stores module."""

import json

import pytest

from task_db.models import BundleStatus, Task, TaskStatus
from task_db.stores import (
    create_bundle,
    delete_bundle,
    find_suggested_bundles_overlapping,
    get_bundle,
    list_bundles,
    load_eligible_tasks,
    save_task_embedding,
    set_bundle_status,
)


class TestLoadEligibleTasks:
    def test_filters_by_status(self, session, add_task) -> None:
        add_task("a", "open", status=TaskStatus.OPEN)
        add_task("b", "in progress", status=TaskStatus.IN_PROGRESS)
        add_task("c", "done", status=TaskStatus.DONE)
        add_task("d", "archived", status=TaskStatus.ARCHIVED)

        tasks = load_eligible_tasks(session)

        assert [t.id for t in tasks] == ["a", "b"]

    def test_ordered_by_creation(self, session, add_task) -> None:
        add_task("z", "first")
        add_task("a", "second")
        assert [t.id for t in load_eligible_tasks(session)] == ["z", "a"]


class TestSaveTaskEmbedding:
    def test_writes_json(self, session, add_task) -> None:
        add_task("a", "task")
        save_task_embedding(session, "a", [0.5, 1])
        assert json.loads(session.get(Task, "a").embedding) == [0.5, 1.0]

    def test_unknown_task_raises(self, session) -> None:
        with pytest.raises(LookupError):
            save_task_embedding(session, "missing", [1.0])


class TestCreateBundle:
    def test_creates_suggested_bundle(self, session, add_task) -> None:
        add_task("a", "A")
        add_task("b", "B")

        bundle = create_bundle(session, ["a", "b"], 0.9, "A / B")

        stored = get_bundle(session, bundle.id)
        assert stored.status == BundleStatus.SUGGESTED
        assert stored.similarity_score == pytest.approx(0.9)
        assert stored.auto_label == "A / B"
        assert sorted(stored.task_ids) == ["a", "b"]
        assert stored.created_at is not None

    def test_requires_two_members(self, session, add_task) -> None:
        add_task("a", "A")
        with pytest.raises(ValueError):
            create_bundle(session, ["a"], 1.0, "A")

    def test_task_can_join_several_bundles(self, session, add_task) -> None:
        add_task("a", "A")
        add_task("b", "B")
        add_task("c", "C")
        create_bundle(session, ["a", "b"], 0.9, "A / B")
        create_bundle(session, ["a", "c"], 0.9, "A / C")
        assert len(session.get(Task, "a").memberships) == 2


class TestFindSuggestedBundlesOverlapping:
    def test_any_overlap_matches(self, session, add_task) -> None:
        for task_id in "abcd":
            add_task(task_id, task_id.upper())
        bundle = create_bundle(session, ["a", "b"], 0.9, "A / B")

        assert [b.id for b in find_suggested_bundles_overlapping(session, ["b", "c"])] == [bundle.id]
        assert find_suggested_bundles_overlapping(session, ["c", "d"]) == []

    def test_reviewed_bundles_ignored(self, session, add_task) -> None:
        add_task("a", "A")
        add_task("b", "B")
        bundle = create_bundle(session, ["a", "b"], 0.9, "A / B")
        set_bundle_status(session, bundle.id, BundleStatus.CONFIRMED)

        assert find_suggested_bundles_overlapping(session, ["a"]) == []

    def test_empty_ids(self, session) -> None:
        assert find_suggested_bundles_overlapping(session, []) == []

    def test_distinct_results(self, session, add_task) -> None:
        add_task("a", "A")
        add_task("b", "B")
        create_bundle(session, ["a", "b"], 0.9, "A / B")
        assert len(find_suggested_bundles_overlapping(session, ["a", "b"])) == 1


class TestReview:
    @pytest.fixture
    def bundle(self, session, add_task):
        add_task("a", "A")
        add_task("b", "B")
        return create_bundle(session, ["a", "b"], 0.9, "A / B")

    def test_set_status(self, session, bundle) -> None:
        updated = set_bundle_status(session, bundle.id, "REJECTED")
        assert updated.status == BundleStatus.REJECTED

    def test_invalid_status(self, session, bundle) -> None:
        with pytest.raises(ValueError):
            set_bundle_status(session, bundle.id, "MAYBE")

    def test_unknown_bundle(self, session) -> None:
        with pytest.raises(LookupError):
            set_bundle_status(session, "missing", BundleStatus.CONFIRMED)

    def test_list_filters_by_status(self, session, bundle) -> None:
        assert [b.id for b in list_bundles(session)] == [bundle.id]
        assert list_bundles(session, status=BundleStatus.CONFIRMED) == []

    def test_delete(self, session, bundle) -> None:
        delete_bundle(session, bundle.id)
        assert get_bundle(session, bundle.id) is None
        # Tasks survive their bundle.
        assert session.get(Task, "a") is not None

    def test_delete_unknown(self, session) -> None:
        with pytest.raises(LookupError):
            delete_bundle(session, "missing")
