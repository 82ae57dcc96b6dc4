"""
Activity counters and leaderboard
"""
from datetime import date, datetime

from dsalytics.services.analytics_service import analytics_service, summarize_completions
from dsalytics.services.problem_service import problem_service
from dsalytics.services.tracking_service import tracking_service


def test_streak_counts_consecutive_days_ending_today():
    timestamps = [datetime(2024, 6, 1, 10), datetime(2024, 6, 2, 18), datetime(2024, 6, 3, 7)]

    summary = summarize_completions(timestamps, today=date(2024, 6, 3))

    assert summary == {"total_completed": 3, "completed_today": 1, "streak": 3}


def test_gap_breaks_streak():
    timestamps = [datetime(2024, 6, 1, 10), datetime(2024, 6, 3, 7)]

    assert summarize_completions(timestamps, today=date(2024, 6, 3))["streak"] == 1


def test_no_completion_today_means_no_streak():
    timestamps = [datetime(2024, 6, 1, 10), datetime(2024, 6, 2, 23, 59)]

    summary = summarize_completions(timestamps, today=date(2024, 6, 3))

    assert summary["streak"] == 0
    assert summary["completed_today"] == 0
    assert summary["total_completed"] == 2


def test_several_completions_on_one_day_count_once_for_streak():
    timestamps = [datetime(2024, 6, 3, 8), datetime(2024, 6, 3, 9), datetime(2024, 6, 2, 21)]

    summary = summarize_completions(timestamps, today=date(2024, 6, 3))

    assert summary["streak"] == 2
    assert summary["completed_today"] == 2


def test_empty_history():
    assert summarize_completions([], today=date(2024, 6, 3)) == {
        "total_completed": 0,
        "completed_today": 0,
        "streak": 0,
    }


def test_user_analytics_spans_all_plans(db, make_plan):
    plan_a = make_plan(2, title="Plan A")
    plan_b = make_plan(2, title="Plan B")
    a_topics = [str(t.id) for t in plan_a.topics]
    b_topics = [str(t.id) for t in plan_b.topics]

    tracking_service.update_topic_status(db, "u1", plan_a.id, a_topics[0], "completed", now=datetime(2024, 6, 2, 20))
    tracking_service.update_topic_status(db, "u1", plan_a.id, a_topics[1], "completed", now=datetime(2024, 6, 3, 9))
    tracking_service.update_topic_status(db, "u1", plan_b.id, b_topics[0], "completed", now=datetime(2024, 6, 3, 11))
    tracking_service.update_topic_status(db, "u2", plan_b.id, b_topics[0], "completed", now=datetime(2024, 6, 3, 12))

    summary = analytics_service.get_user_analytics(db, "u1", today=date(2024, 6, 3))

    assert summary == {"total_completed": 3, "completed_today": 2, "streak": 2}


def test_uncompleted_topics_leave_the_history(db, make_plan):
    plan = make_plan(1)
    topic_id = str(plan.topics[0].id)
    tracking_service.update_topic_status(db, "u1", plan.id, topic_id, "completed", now=datetime(2024, 6, 3, 9))
    tracking_service.update_topic_status(db, "u1", plan.id, topic_id, "not-started", now=datetime(2024, 6, 3, 10))

    summary = analytics_service.get_user_analytics(db, "u1", today=date(2024, 6, 3))

    assert summary["total_completed"] == 0
    assert summary["streak"] == 0


def test_leaderboard_ranks_by_solved_then_topics(db, make_plan):
    plan = make_plan(2)
    first_topic = str(plan.topics[0].id)

    problem_service.set_status(db, "alice", "1", status="solved")
    problem_service.set_status(db, "alice", "2", status="solved")
    problem_service.set_status(db, "bob", "1", status="solved")
    problem_service.set_status(db, "bob", "3", status="attempted")
    tracking_service.update_topic_status(db, "bob", plan.id, first_topic, "completed")
    problem_service.set_status(db, "carol", "4", status="solved")

    entries = analytics_service.get_leaderboard(db, limit=10)

    assert [e["user_id"] for e in entries] == ["alice", "bob", "carol"]
    assert [e["rank"] for e in entries] == [1, 2, 3]
    assert entries[0]["solved_problems"] == 2
    assert entries[1]["completed_topics"] == 1
    assert entries[2]["name"] == "carol"

    assert len(analytics_service.get_leaderboard(db, limit=1)) == 1
