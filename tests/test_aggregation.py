from datetime import date, datetime

from academy.schemas import (
    BatchCreate,
    DrillListContent,
    DrillRecommendationCreate,
    ProgressSummaryCreate,
    SessionCreate,
    SkillAssessmentCreate,
    StudentCreate,
    TrainingPlanCreate,
    TrainingPlanUpdate,
    TrainingPlanWeek,
    UserCreate,
    WeeklyPlanContent,
)
from academy.seed import seed_sample_data


def _scores(storage, student_id, value):
    return storage.create_skill_assessment(SkillAssessmentCreate(
        student_id=student_id, serve=value, footwork=value, stamina=value, mental_focus=value
    ))


def test_dashboard_counts(storage):
    coach = storage.create_user(UserCreate(username="c", password="x", academy_name="A"))
    batch = storage.create_batch(BatchCreate(name="B", age_group="8-12", level="beginner", coach_id=coach.id))
    storage.create_student(StudentCreate(name="A", age=10))
    storage.create_student(StudentCreate(name="B", age=10, status="at_risk"))
    storage.create_student(StudentCreate(name="C", age=10, status="inactive"))
    storage.create_session(SessionCreate(batch_id=batch.id, date=datetime(2024, 5, 1, 9), coach_id=coach.id))
    storage.create_session(SessionCreate(batch_id=batch.id, date=datetime(2024, 5, 1, 17), coach_id=coach.id))
    storage.create_session(SessionCreate(batch_id=batch.id, date=datetime(2024, 5, 2, 9), coach_id=coach.id))

    stats = storage.get_dashboard_stats(today=date(2024, 5, 1))
    assert stats.sessions_today == 2
    assert stats.total_students == 3
    assert stats.active_students == 1
    assert stats.at_risk_students == 1
    assert stats.average_improvement == 0.0
    assert stats.day == date(2024, 5, 1)


def test_average_improvement_uses_two_latest_assessments(storage):
    emma = storage.create_student(StudentCreate(name="Emma", age=10))
    liam = storage.create_student(StudentCreate(name="Liam", age=11))
    noah = storage.create_student(StudentCreate(name="Noah", age=12))

    _scores(storage, emma.id, 3)
    _scores(storage, emma.id, 5)
    _scores(storage, emma.id, 8)  # +3 over the previous one
    _scores(storage, liam.id, 6)
    _scores(storage, liam.id, 5)  # -1
    _scores(storage, noah.id, 7)  # only one assessment, ignored

    assert storage.get_dashboard_stats().average_improvement == 1.0


def test_sessions_filtered_by_day_and_batch(storage):
    coach = storage.create_user(UserCreate(username="c", password="x", academy_name="A"))
    one = storage.create_batch(BatchCreate(name="One", age_group="8-12", level="beginner", coach_id=coach.id))
    two = storage.create_batch(BatchCreate(name="Two", age_group="8-12", level="beginner", coach_id=coach.id))
    storage.create_session(SessionCreate(batch_id=one.id, date=datetime(2024, 5, 1, 9), coach_id=coach.id))
    storage.create_session(SessionCreate(batch_id=two.id, date=datetime(2024, 5, 1, 9), coach_id=coach.id))
    storage.create_session(SessionCreate(batch_id=one.id, date=datetime(2024, 5, 3, 9), coach_id=coach.id))

    assert len(storage.get_sessions(on_date=date(2024, 5, 1))) == 2
    assert len(storage.get_sessions(batch_id=one.id)) == 2
    only = storage.get_sessions(batch_id=one.id, on_date=date(2024, 5, 3))
    assert [s.date.day for s in only] == [3]
    assert only[0].batch.name == "One"
    assert only[0].coach.username == "c"


def test_student_view_includes_latest_assessment(storage):
    student = storage.create_student(StudentCreate(name="Emma", age=10))
    _scores(storage, student.id, 4)
    latest = _scores(storage, student.id, 6)

    [view] = storage.get_students()
    assert view.latest_skill_assessment.id == latest.id
    assert view.batch is None


def test_training_plan_view_and_content_round_trip(storage):
    coach = storage.create_user(UserCreate(username="c", password="x", academy_name="A"))
    student = storage.create_student(StudentCreate(name="Emma", age=10))
    plan = storage.create_training_plan(TrainingPlanCreate(
        student_id=student.id,
        week=2,
        focus_areas=["Serve"],
        drills=WeeklyPlanContent(plan=TrainingPlanWeek(week=2, focus_areas=["Serve"])),
        created_by=coach.id,
    ))
    assert plan.status == "generated"

    view = storage.get_training_plan(plan.id)
    assert view.student.name == "Emma"
    assert view.batch is None
    assert view.creator.username == "c"
    assert view.drills.kind == "weekly_plan"
    assert view.drills.plan.week == 2

    updated = storage.update_training_plan(plan.id, TrainingPlanUpdate(status="approved"))
    assert updated.status == "approved"
    assert updated.drills == plan.drills
    assert [p.id for p in storage.get_training_plans(student_id=student.id)] == [plan.id]
    assert storage.get_training_plans(batch_id=99) == []


def test_deleting_student_keeps_plan_without_student(storage):
    student = storage.create_student(StudentCreate(name="Emma", age=10))
    plan = storage.create_training_plan(TrainingPlanCreate(student_id=student.id, week=1))

    storage.delete_student(student.id)

    view = storage.get_training_plan(plan.id)
    assert view.student_id is None
    assert view.student is None


def test_progress_summaries_newest_first(storage):
    student = storage.create_student(StudentCreate(name="Emma", age=10))
    first = storage.create_progress_summary(ProgressSummaryCreate(student_id=student.id, week=10, summary="one"))
    second = storage.create_progress_summary(ProgressSummaryCreate(
        student_id=student.id, week=11, summary="two", next_week_focus=["Serve"]
    ))

    summaries = storage.get_progress_summaries(student.id)
    assert [s.id for s in summaries] == [second.id, first.id]
    assert summaries[0].next_week_focus == ["Serve"]


def test_drill_recommendations_are_limited_newest_first(storage):
    for i in range(12):
        storage.create_drill_recommendation(DrillRecommendationCreate(
            query=f"query {i}", recommendations=DrillListContent(drills=[])
        ))

    recent = storage.get_drill_recommendations()
    assert len(recent) == 10
    assert recent[0].query == "query 11"
    assert [r.query for r in storage.get_drill_recommendations(limit=2)] == ["query 11", "query 10"]


def test_seed_loads_once(storage):
    assert seed_sample_data(storage) is True
    assert seed_sample_data(storage) is False

    assert len(storage.get_students()) == 3
    assert [s.name for s in storage.get_at_risk_students()] == ["Rahul Kumar"]
    assert storage.get_user_by_username("admin@academy.com").role == "admin"
    assert all(s.latest_skill_assessment is not None for s in storage.get_students())
