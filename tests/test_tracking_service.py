"""
Study plan tracking: progress recomputation, timestamps and unlocking
"""
import random
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from uuid import uuid4

import pytest

from dsalytics.exceptions import InvalidInput, InvalidTransition, NotFound
from dsalytics.models.enums import TopicStatus
from dsalytics.services.tracking_service import (
    completion_percentage,
    plan_status_for,
    tracking_service,
)

USER = "user-1"
T0 = datetime(2024, 6, 1, 9, 0)


def _half_up(completed: int, total: int) -> int:
    return int((Decimal(100 * completed) / Decimal(total)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@pytest.mark.parametrize(
    "completed,total,expected",
    [(0, 4, 0), (1, 4, 25), (1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 8, 38), (4, 4, 100), (0, 0, 0)],
)
def test_completion_percentage_rounds_half_up(completed, total, expected):
    assert completion_percentage(completed, total) == expected


def test_plan_status_for():
    assert plan_status_for(0, 3).value == "not-started"
    assert plan_status_for(1, 3).value == "in-progress"
    assert plan_status_for(3, 3).value == "completed"
    assert plan_status_for(0, 0).value == "not-started"


def test_get_or_create_seeds_topics_in_plan_order(db, make_plan):
    plan = make_plan(3)

    user_plan = tracking_service.get_or_create(db, USER, plan.id)

    assert user_plan.status == "not-started"
    assert user_plan.progress == 0
    assert user_plan.started_at is None
    assert [t.topic_id for t in user_plan.topics_progress] == [str(t.id) for t in plan.topics]
    assert all(t.status == "not-started" and t.completed_at is None for t in user_plan.topics_progress)


def test_get_or_create_returns_existing_record(db, make_plan):
    plan = make_plan(2)
    first = tracking_service.get_or_create(db, USER, plan.id)
    tracking_service.update_topic_status(db, USER, plan.id, first.topics_progress[0].topic_id, "completed", now=T0)

    second = tracking_service.get_or_create(db, USER, plan.id)

    assert second.id == first.id
    assert second.progress == 50


def test_get_or_create_unknown_plan(db):
    with pytest.raises(NotFound):
        tracking_service.get_or_create(db, USER, uuid4())


def test_four_topic_plan_end_to_end(db, make_plan):
    plan = make_plan(4)
    user_plan = tracking_service.get_or_create(db, USER, plan.id)
    ids = [t.topic_id for t in user_plan.topics_progress]

    user_plan = tracking_service.update_topic_status(db, USER, plan.id, ids[0], "completed", now=T0)
    assert user_plan.progress == 25
    assert user_plan.status == "in-progress"
    assert user_plan.started_at == T0
    assert user_plan.completed_at is None

    for i, topic_id in enumerate(ids[1:], start=1):
        user_plan = tracking_service.update_topic_status(
            db, USER, plan.id, topic_id, "completed", now=T0 + timedelta(hours=i)
        )

    assert user_plan.progress == 100
    assert user_plan.status == "completed"
    assert user_plan.completed_at == T0 + timedelta(hours=3)
    assert user_plan.started_at == T0
    assert user_plan.last_activity_at == T0 + timedelta(hours=3)


def test_in_progress_topic_starts_plan_without_completing(db, make_plan):
    plan = make_plan(2)
    user_plan = tracking_service.get_or_create(db, USER, plan.id)

    user_plan = tracking_service.update_topic_status(
        db, USER, plan.id, user_plan.topics_progress[0].topic_id, "in-progress", now=T0
    )

    assert user_plan.started_at == T0
    assert user_plan.progress == 0
    assert user_plan.status == "not-started"
    assert user_plan.topics_progress[0].completed_at is None


def test_reverting_completed_topic_clears_timestamps(db, make_plan):
    plan = make_plan(2)
    user_plan = tracking_service.get_or_create(db, USER, plan.id)
    ids = [t.topic_id for t in user_plan.topics_progress]
    tracking_service.update_topic_status(db, USER, plan.id, ids[0], "completed", now=T0)
    user_plan = tracking_service.update_topic_status(db, USER, plan.id, ids[1], "completed", now=T0)
    assert user_plan.status == "completed"

    user_plan = tracking_service.update_topic_status(
        db, USER, plan.id, ids[1], "not-started", now=T0 + timedelta(days=1)
    )

    assert user_plan.topics_progress[1].completed_at is None
    assert user_plan.progress == 50
    assert user_plan.status == "in-progress"
    assert user_plan.completed_at is None
    assert user_plan.started_at == T0


def test_repeated_status_is_idempotent_except_timestamps(db, make_plan):
    plan = make_plan(1)
    user_plan = tracking_service.get_or_create(db, USER, plan.id)
    topic_id = user_plan.topics_progress[0].topic_id

    tracking_service.update_topic_status(db, USER, plan.id, topic_id, "completed", now=T0)
    later = T0 + timedelta(minutes=5)
    user_plan = tracking_service.update_topic_status(db, USER, plan.id, topic_id, "completed", now=later)

    assert user_plan.progress == 100
    assert user_plan.status == "completed"
    assert len(user_plan.topics_progress) == 1
    assert user_plan.topics_progress[0].completed_at == later
    assert user_plan.last_activity_at == later
    assert user_plan.completed_at == T0
    assert user_plan.started_at == T0


def test_locked_topic_cannot_start(db, make_plan):
    plan = make_plan(3)
    user_plan = tracking_service.get_or_create(db, USER, plan.id)
    ids = [t.topic_id for t in user_plan.topics_progress]

    with pytest.raises(InvalidTransition):
        tracking_service.update_topic_status(db, USER, plan.id, ids[1], "in-progress", now=T0)

    tracking_service.update_topic_status(db, USER, plan.id, ids[0], "in-progress", now=T0)
    with pytest.raises(InvalidTransition):
        tracking_service.update_topic_status(db, USER, plan.id, ids[1], "completed", now=T0)

    tracking_service.update_topic_status(db, USER, plan.id, ids[0], "completed", now=T0)
    user_plan = tracking_service.update_topic_status(db, USER, plan.id, ids[1], "completed", now=T0)
    assert user_plan.progress == 67


def test_resetting_locked_topic_is_allowed(db, make_plan):
    plan = make_plan(2)
    user_plan = tracking_service.get_or_create(db, USER, plan.id)
    ids = [t.topic_id for t in user_plan.topics_progress]

    user_plan = tracking_service.update_topic_status(db, USER, plan.id, ids[1], "not-started", now=T0)

    assert user_plan.topics_progress[1].status == "not-started"
    assert user_plan.last_activity_at == T0


def test_unlock_rule_can_be_advisory(db, make_plan, monkeypatch):
    monkeypatch.setattr(tracking_service, "enforce_sequential_unlock", False)
    plan = make_plan(3)
    user_plan = tracking_service.get_or_create(db, USER, plan.id)

    user_plan = tracking_service.update_topic_status(
        db, USER, plan.id, user_plan.topics_progress[2].topic_id, "completed", now=T0
    )

    assert user_plan.progress == 33
    assert user_plan.status == "in-progress"


def test_unknown_topic_and_status(db, make_plan):
    plan = make_plan(2)
    user_plan = tracking_service.get_or_create(db, USER, plan.id)

    with pytest.raises(NotFound):
        tracking_service.update_topic_status(db, USER, plan.id, "no-such-topic", "completed")
    with pytest.raises(InvalidInput):
        tracking_service.update_topic_status(
            db, USER, plan.id, user_plan.topics_progress[0].topic_id, "done"
        )


def test_update_topic_status_creates_record_implicitly(db, make_plan):
    plan = make_plan(2)
    first_topic = str(plan.topics[0].id)

    user_plan = tracking_service.update_topic_status(db, USER, plan.id, first_topic, "completed", now=T0)

    assert user_plan.progress == 50


def test_progress_invariants_hold_for_random_updates(db, make_plan, monkeypatch):
    monkeypatch.setattr(tracking_service, "enforce_sequential_unlock", False)
    plan = make_plan(8)
    user_plan = tracking_service.get_or_create(db, USER, plan.id)
    ids = [t.topic_id for t in user_plan.topics_progress]
    statuses = [s.value for s in TopicStatus]
    rng = random.Random(1234)

    for step in range(40):
        user_plan = tracking_service.update_topic_status(
            db, USER, plan.id, rng.choice(ids), rng.choice(statuses), now=T0 + timedelta(minutes=step)
        )
        completed = sum(1 for t in user_plan.topics_progress if t.status == "completed")

        assert user_plan.progress == _half_up(completed, len(ids))
        assert (user_plan.status == "completed") == (completed == len(ids))
        assert (user_plan.status == "in-progress") == (0 < completed < len(ids))
        assert (user_plan.completed_at is not None) == (completed == len(ids))
        for topic in user_plan.topics_progress:
            assert (topic.completed_at is not None) == (topic.status == "completed")


def test_update_plan_progress_overrides_verbatim(db, make_plan):
    plan = make_plan(4)
    tracking_service.get_or_create(db, USER, plan.id)

    user_plan = tracking_service.update_plan_progress(db, USER, plan.id, status="completed", progress=42)

    assert user_plan.status == "completed"
    assert user_plan.progress == 42
    assert all(t.status == "not-started" for t in user_plan.topics_progress)


def test_update_plan_progress_validation(db, make_plan):
    plan = make_plan(2)

    with pytest.raises(NotFound):
        tracking_service.update_plan_progress(db, USER, plan.id, progress=10)

    tracking_service.get_or_create(db, USER, plan.id)
    with pytest.raises(InvalidInput):
        tracking_service.update_plan_progress(db, USER, plan.id, status="paused")
    with pytest.raises(InvalidInput):
        tracking_service.update_plan_progress(db, USER, plan.id, progress=101)


def test_custom_plan_lifecycle(db):
    user_plan = tracking_service.create_custom_plan(
        db, USER, title="Graphs", topics=[{"title": "BFS"}, {"title": "DFS", "duration": "2 days"}]
    )
    assert user_plan.is_custom
    assert [t.topic_id for t in user_plan.topics_progress] == ["0", "1"]

    user_plan = tracking_service.update_custom_topic_status(db, USER, user_plan.id, "0", "completed", now=T0)
    assert user_plan.progress == 50

    user_plan = tracking_service.update_custom_plan(
        db, USER, user_plan.id, title="Graphs II", topics=[{"title": "Dijkstra"}], now=T0
    )
    assert user_plan.custom_title == "Graphs II"
    assert user_plan.progress == 0
    assert user_plan.status == "not-started"
    assert len(user_plan.topics_progress) == 1

    tracking_service.delete_custom_plan(db, USER, user_plan.id)
    with pytest.raises(NotFound):
        tracking_service.delete_custom_plan(db, USER, user_plan.id)


def test_custom_plan_is_private_to_owner(db):
    user_plan = tracking_service.create_custom_plan(db, USER, title="Mine", topics=[{"title": "A"}])

    with pytest.raises(NotFound):
        tracking_service.update_custom_topic_status(db, "someone-else", user_plan.id, "0", "completed")


def test_delete_all(db, make_plan):
    plan = make_plan(2)
    tracking_service.get_or_create(db, USER, plan.id)
    tracking_service.get_or_create(db, "user-2", plan.id)

    assert tracking_service.delete_all(db) == 2
    assert tracking_service.list_user_plans(db, USER) == []


def test_completed_topic_can_be_reapplied_after_predecessor_reset(db, make_plan):
    plan = make_plan(3)
    user_plan = tracking_service.get_or_create(db, USER, plan.id)
    ids = [t.topic_id for t in user_plan.topics_progress]
    tracking_service.update_topic_status(db, USER, plan.id, ids[0], "completed", now=T0)
    tracking_service.update_topic_status(db, USER, plan.id, ids[1], "completed", now=T0)
    tracking_service.update_topic_status(db, USER, plan.id, ids[0], "not-started", now=T0)

    later = T0 + timedelta(hours=1)
    user_plan = tracking_service.update_topic_status(db, USER, plan.id, ids[1], "completed", now=later)

    assert user_plan.topics_progress[1].status == "completed"
    assert user_plan.topics_progress[1].completed_at == later
    assert user_plan.progress == 33

    with pytest.raises(InvalidTransition):
        tracking_service.update_topic_status(db, USER, plan.id, ids[1], "in-progress", now=later)
