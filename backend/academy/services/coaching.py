# backend/academy/services/coaching.py

from datetime import date
from typing import Optional

import structlog

from academy.errors import AdvisoryError, InvalidRequestError, NotFoundError
from academy.schemas import (
    Drill,
    DrillListContent,
    DrillQuery,
    DrillRecommendationCreate,
    GeneratedBy,
    ProgressSummary,
    ProgressSummaryCreate,
    RetentionPlan,
    SkillAssessment,
    SkillScores,
    StudentWithBatch,
    TrainingPlan,
    TrainingPlanCreate,
    TrainingPlanGenerateRequest,
    User,
    WeeklyPlanContent,
)
from academy.services.advisor import Advisor, fallback_drills, fallback_training_plan
from academy.storage import Storage

logger = structlog.get_logger(__name__)

DEFAULT_SKILLS = SkillScores(serve=5, footwork=5, stamina=5, mental_focus=5)


def skill_level_for(assessment: Optional[SkillAssessment]) -> str:
    if assessment is None:
        return "beginner"
    if assessment.overall >= 7:
        return "advanced"
    if assessment.overall >= 5:
        return "intermediate"
    return "beginner"


def scores_of(assessment: Optional[SkillAssessment]) -> SkillScores:
    if assessment is None:
        return DEFAULT_SKILLS
    return SkillScores(
        serve=assessment.serve,
        footwork=assessment.footwork,
        stamina=assessment.stamina,
        mental_focus=assessment.mental_focus,
    )


def attendance_summary(storage: Storage, student_id: int) -> tuple[float, int]:
    """Attendance rate in percent and the number of consecutive missed sessions, newest first.

    A student without attendance records counts as fully attending.
    """
    dated = []
    for row in storage.get_student_attendance(student_id):
        session = storage.get_session(row.session_id)
        if session is not None:
            dated.append((session.date, row.id, row.present))
    if not dated:
        return 100.0, 0

    present = sum(1 for _, _, was_present in dated if was_present)
    rate = round(present / len(dated) * 100, 1)

    missed = 0
    for _, _, was_present in sorted(dated, reverse=True):
        if was_present:
            break
        missed += 1
    return rate, missed


# -----------------------------
# Training plans
# -----------------------------
def _plan_for_student(
    storage: Storage,
    advisor: Advisor,
    student: StudentWithBatch,
    focus_areas: Optional[list[str]],
    principal: User,
) -> TrainingPlan:
    assessment = student.latest_skill_assessment
    skill_level = skill_level_for(assessment)
    try:
        week = advisor.generate_training_plan(
            student.name, student.age, skill_level, scores_of(assessment), focus_areas
        )
        generated_by = GeneratedBy.AI
    except AdvisoryError as exc:
        logger.warning("training_plan_fallback", student_id=student.id, error=str(exc))
        week = fallback_training_plan(skill_level)
        generated_by = GeneratedBy.FALLBACK

    return storage.create_training_plan(TrainingPlanCreate(
        student_id=student.id,
        batch_id=student.batch_id,
        week=max(week.week, 1),
        focus_areas=week.focus_areas,
        drills=WeeklyPlanContent(plan=week),
        generated_by=generated_by,
        created_by=principal.id,
    ))


def generate_training_plans(
    storage: Storage,
    advisor: Advisor,
    request: TrainingPlanGenerateRequest,
    principal: User,
) -> list[TrainingPlan]:
    """Generate one plan for a student, or one per student of a batch."""
    if request.student_id is not None:
        student = storage.get_student(request.student_id)
        if student is None:
            raise NotFoundError("Student not found")
        students = [student]
    elif request.batch_id is not None:
        students = storage.get_students(request.batch_id)
        if not students:
            raise NotFoundError("No students found in batch")
    else:
        raise InvalidRequestError("Either student_id or batch_id is required")

    plans = [_plan_for_student(storage, advisor, s, request.focus_areas, principal) for s in students]
    logger.info("training_plans_generated", count=len(plans), created_by=principal.id)
    return plans


# -----------------------------
# Progress summaries
# -----------------------------
def generate_progress_summary(storage: Storage, advisor: Advisor, student_id: int) -> ProgressSummary:
    student = storage.get_student(student_id)
    if student is None:
        raise NotFoundError("Student not found")

    assessments = storage.get_skill_assessments(student_id)
    if len(assessments) < 2:
        raise InvalidRequestError("Need at least 2 skill assessments to generate progress summary")

    notes = [a.notes for a in assessments[:5] if a.notes]
    attendance_rate, _ = attendance_summary(storage, student_id)

    insight = advisor.generate_progress_summary(
        student.name,
        scores_of(assessments[1]),
        scores_of(assessments[0]),
        notes,
        attendance_rate,
    )

    summary = storage.create_progress_summary(ProgressSummaryCreate(
        student_id=student_id,
        week=date.today().isocalendar()[1],
        summary=insight.summary,
        improvements=insight.improvements,
        concerns=insight.concerns,
        recommendations=insight.recommendations,
        next_week_focus=insight.next_week_focus,
    ))
    logger.info("progress_summary_generated", student_id=student_id, summary_id=summary.id)
    return summary


# -----------------------------
# Drill recommendations
# -----------------------------
def recommend_drills(storage: Storage, advisor: Advisor, query: DrillQuery, principal: User) -> list[Drill]:
    try:
        drills = advisor.recommend_drills(query.query, query.age_group, query.skill_level)
    except AdvisoryError as exc:
        logger.warning("drill_recommendation_fallback", query=query.query, error=str(exc))
        drills = fallback_drills(query.query, query.skill_level)

    storage.create_drill_recommendation(DrillRecommendationCreate(
        query=query.query,
        recommendations=DrillListContent(drills=drills),
        age_group=query.age_group,
        skill_level=query.skill_level,
        created_by=principal.id,
    ))
    return drills


# -----------------------------
# Dropout risk
# -----------------------------
def analyze_dropout_risk(storage: Storage, advisor: Advisor, student_id: int) -> RetentionPlan:
    student = storage.get_student(student_id)
    if student is None:
        raise NotFoundError("Student not found")

    assessments = storage.get_skill_assessments(student_id)
    progression = [a.overall for a in reversed(assessments[:5])]
    notes = [a.notes for a in assessments[:3] if a.notes]
    attendance_rate, missed = attendance_summary(storage, student_id)

    return advisor.analyze_dropout_risk(student.name, attendance_rate, progression, missed, notes)
