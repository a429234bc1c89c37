"""Storage contract shared by the in-memory and SQL backends.

A backend only implements five primitives over records keyed by their
schema class (``_insert``, ``_get``, ``_update``, ``_delete``, ``_list``).
Every public operation, including defaults, upserts, delete policies and
the aggregated read views, is written here on top of those primitives, so
the two backends return the same results for the same calls.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Optional, TypeVar

import structlog

from academy import schemas
from academy.errors import ConflictError
from academy.schemas import (
    Attendance,
    AttendanceCreate,
    AttendanceWithStudent,
    Batch,
    BatchCreate,
    BatchUpdate,
    DashboardStats,
    DrillRecommendation,
    DrillRecommendationCreate,
    ProgressSummary,
    ProgressSummaryCreate,
    Session,
    SessionCreate,
    SessionUpdate,
    SessionWithDetails,
    SkillAssessment,
    SkillAssessmentCreate,
    Student,
    StudentCreate,
    StudentStatus,
    StudentUpdate,
    StudentWithBatch,
    TrainingPlan,
    TrainingPlanCreate,
    TrainingPlanUpdate,
    TrainingPlanWithDetails,
    User,
    UserCreate,
    UserOut,
)

logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=schemas.Record)


def _newest_first(records: list[RecordT]) -> list[RecordT]:
    # Equal timestamps fall back to the id, so the last inserted record wins.
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)


def _changes(data: schemas.Record) -> dict[str, Any]:
    return data.model_dump(exclude_unset=True)


class Storage(ABC):
    """Access service for every academy entity and its read views."""

    # -----------------------------
    # Primitives (per backend)
    # -----------------------------
    @abstractmethod
    def _insert(self, entity: type[RecordT], values: dict[str, Any]) -> RecordT:
        """Assign the next id for ``entity``, store ``values`` and return the record."""

    @abstractmethod
    def _get(self, entity: type[RecordT], record_id: int) -> Optional[RecordT]:
        ...

    @abstractmethod
    def _update(self, entity: type[RecordT], record_id: int, values: dict[str, Any]) -> Optional[RecordT]:
        ...

    @abstractmethod
    def _delete(self, entity: type[RecordT], record_id: int) -> bool:
        ...

    @abstractmethod
    def _list(self, entity: type[RecordT], **equals: Any) -> list[RecordT]:
        """Records whose fields equal ``equals``, in insertion order."""

    def _create(self, entity: type[RecordT], data: schemas.Record, **extra: Any) -> RecordT:
        values = data.model_dump()
        values.update(extra)
        values["created_at"] = datetime.now()
        return self._insert(entity, values)

    # -----------------------------
    # Users
    # -----------------------------
    def get_user(self, user_id: int) -> Optional[User]:
        return self._get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        users = self._list(User, username=username)
        return users[0] if users else None

    def create_user(self, data: UserCreate) -> User:
        if self.get_user_by_username(data.username) is not None:
            raise ConflictError(f"Username {data.username!r} is already taken")
        return self._create(User, data)

    # -----------------------------
    # Batches
    # -----------------------------
    def get_batches(self, coach_id: Optional[int] = None) -> list[Batch]:
        if coach_id is None:
            return self._list(Batch)
        return self._list(Batch, coach_id=coach_id)

    def get_batch(self, batch_id: int) -> Optional[Batch]:
        return self._get(Batch, batch_id)

    def create_batch(self, data: BatchCreate) -> Batch:
        return self._create(Batch, data)

    def update_batch(self, batch_id: int, data: BatchUpdate) -> Optional[Batch]:
        return self._update(Batch, batch_id, _changes(data))

    def delete_batch(self, batch_id: int) -> bool:
        """Delete a batch. Its students and plans are detached, its sessions removed."""
        if self._get(Batch, batch_id) is None:
            return False
        for student in self._list(Student, batch_id=batch_id):
            self._update(Student, student.id, {"batch_id": None})
        for plan in self._list(TrainingPlan, batch_id=batch_id):
            self._update(TrainingPlan, plan.id, {"batch_id": None})
        for session in self._list(Session, batch_id=batch_id):
            self.delete_session(session.id)
        logger.debug("batch_deleted", batch_id=batch_id)
        return self._delete(Batch, batch_id)

    # -----------------------------
    # Students
    # -----------------------------
    def get_students(self, batch_id: Optional[int] = None) -> list[StudentWithBatch]:
        if batch_id is None:
            students = self._list(Student)
        else:
            students = self._list(Student, batch_id=batch_id)
        return [self._student_view(student) for student in students]

    def get_student(self, student_id: int) -> Optional[StudentWithBatch]:
        student = self._get(Student, student_id)
        if student is None:
            return None
        return self._student_view(student)

    def student_exists(self, student_id: int) -> bool:
        return self._get(Student, student_id) is not None

    def create_student(self, data: StudentCreate) -> Student:
        return self._create(Student, data, join_date=datetime.now())

    def update_student(self, student_id: int, data: StudentUpdate) -> Optional[Student]:
        return self._update(Student, student_id, _changes(data))

    def delete_student(self, student_id: int) -> bool:
        """Delete a student with their assessments, attendance and summaries."""
        if self._get(Student, student_id) is None:
            return False
        for row in self._list(Attendance, student_id=student_id):
            self._delete(Attendance, row.id)
        for assessment in self._list(SkillAssessment, student_id=student_id):
            self._delete(SkillAssessment, assessment.id)
        for summary in self._list(ProgressSummary, student_id=student_id):
            self._delete(ProgressSummary, summary.id)
        for plan in self._list(TrainingPlan, student_id=student_id):
            self._update(TrainingPlan, plan.id, {"student_id": None})
        logger.debug("student_deleted", student_id=student_id)
        return self._delete(Student, student_id)

    def get_at_risk_students(self) -> list[StudentWithBatch]:
        return [s for s in self.get_students() if s.status == StudentStatus.AT_RISK]

    def _student_view(self, student: Student) -> StudentWithBatch:
        batch = self._get(Batch, student.batch_id) if student.batch_id is not None else None
        return StudentWithBatch(
            **student.model_dump(),
            batch=batch,
            latest_skill_assessment=self.get_latest_skill_assessment(student.id),
        )

    # -----------------------------
    # Skill assessments
    # -----------------------------
    def get_skill_assessments(self, student_id: int) -> list[SkillAssessment]:
        """Assessments for a student, newest first."""
        return _newest_first(self._list(SkillAssessment, student_id=student_id))

    def get_skill_assessment(self, assessment_id: int) -> Optional[SkillAssessment]:
        return self._get(SkillAssessment, assessment_id)

    def get_latest_skill_assessment(self, student_id: int) -> Optional[SkillAssessment]:
        assessments = self.get_skill_assessments(student_id)
        return assessments[0] if assessments else None

    def create_skill_assessment(self, data: SkillAssessmentCreate) -> SkillAssessment:
        return self._create(SkillAssessment, data, overall=schemas.overall_score(data))

    def delete_skill_assessment(self, assessment_id: int) -> bool:
        return self._delete(SkillAssessment, assessment_id)

    # -----------------------------
    # Sessions
    # -----------------------------
    def get_sessions(self, batch_id: Optional[int] = None, on_date: Optional[date] = None) -> list[SessionWithDetails]:
        if batch_id is None:
            sessions = self._list(Session)
        else:
            sessions = self._list(Session, batch_id=batch_id)
        if on_date is not None:
            sessions = [s for s in sessions if s.date.date() == on_date]
        return [self._session_view(session) for session in sessions]

    def get_session(self, session_id: int) -> Optional[SessionWithDetails]:
        session = self._get(Session, session_id)
        if session is None:
            return None
        return self._session_view(session)

    def get_session_record(self, session_id: int) -> Optional[Session]:
        """The bare session row, without batch, coach or attendance."""
        return self._get(Session, session_id)

    def session_exists(self, session_id: int) -> bool:
        return self.get_session_record(session_id) is not None

    def create_session(self, data: SessionCreate) -> Session:
        return self._create(Session, data)

    def update_session(self, session_id: int, data: SessionUpdate) -> Optional[Session]:
        return self._update(Session, session_id, _changes(data))

    def delete_session(self, session_id: int) -> bool:
        """Delete a session and its attendance; assessments taken in it are kept."""
        if self._get(Session, session_id) is None:
            return False
        for row in self._list(Attendance, session_id=session_id):
            self._delete(Attendance, row.id)
        for assessment in self._list(SkillAssessment, session_id=session_id):
            self._update(SkillAssessment, assessment.id, {"session_id": None})
        return self._delete(Session, session_id)

    def _session_view(self, session: Session) -> SessionWithDetails:
        coach = self._get(User, session.coach_id)
        return SessionWithDetails(
            **session.model_dump(),
            batch=self._get(Batch, session.batch_id),
            coach=UserOut(**coach.model_dump()) if coach is not None else None,
            attendance=self.get_attendance(session.id),
        )

    # -----------------------------
    # Attendance
    # -----------------------------
    def get_attendance(self, session_id: int) -> list[AttendanceWithStudent]:
        return [
            AttendanceWithStudent(**row.model_dump(), student=self._get(Student, row.student_id))
            for row in self._list(Attendance, session_id=session_id)
        ]

    def get_student_attendance(self, student_id: int) -> list[Attendance]:
        return self._list(Attendance, student_id=student_id)

    def _find_attendance(self, session_id: int, student_id: int) -> Optional[Attendance]:
        rows = self._list(Attendance, session_id=session_id, student_id=student_id)
        return rows[0] if rows else None

    def mark_attendance(self, data: AttendanceCreate) -> Attendance:
        """Record attendance for a (session, student) pair, updating an existing row."""
        existing = self._find_attendance(data.session_id, data.student_id)
        if existing is not None:
            return self._update(Attendance, existing.id, {"present": data.present, "notes": data.notes})
        return self._create(Attendance, data)

    def update_attendance(self, session_id: int, student_id: int, present: bool) -> Attendance:
        """Set ``present`` for a pair, creating the row when it does not exist yet."""
        existing = self._find_attendance(session_id, student_id)
        if existing is not None:
            return self._update(Attendance, existing.id, {"present": present})
        return self._create(Attendance, AttendanceCreate(session_id=session_id, student_id=student_id, present=present))

    # -----------------------------
    # Training plans
    # -----------------------------
    def get_training_plans(
        self, student_id: Optional[int] = None, batch_id: Optional[int] = None
    ) -> list[TrainingPlanWithDetails]:
        filters = {}
        if student_id is not None:
            filters["student_id"] = student_id
        if batch_id is not None:
            filters["batch_id"] = batch_id
        return [self._plan_view(plan) for plan in self._list(TrainingPlan, **filters)]

    def get_training_plan(self, plan_id: int) -> Optional[TrainingPlanWithDetails]:
        plan = self._get(TrainingPlan, plan_id)
        if plan is None:
            return None
        return self._plan_view(plan)

    def create_training_plan(self, data: TrainingPlanCreate) -> TrainingPlan:
        return self._create(TrainingPlan, data)

    def update_training_plan(self, plan_id: int, data: TrainingPlanUpdate) -> Optional[TrainingPlan]:
        return self._update(TrainingPlan, plan_id, _changes(data))

    def delete_training_plan(self, plan_id: int) -> bool:
        return self._delete(TrainingPlan, plan_id)

    def _plan_view(self, plan: TrainingPlan) -> TrainingPlanWithDetails:
        student = self._get(Student, plan.student_id) if plan.student_id is not None else None
        batch = self._get(Batch, plan.batch_id) if plan.batch_id is not None else None
        creator = self._get(User, plan.created_by) if plan.created_by is not None else None
        return TrainingPlanWithDetails(
            **plan.model_dump(),
            student=student,
            batch=batch,
            creator=UserOut(**creator.model_dump()) if creator is not None else None,
        )

    # -----------------------------
    # Progress summaries
    # -----------------------------
    def get_progress_summaries(self, student_id: int) -> list[ProgressSummary]:
        return _newest_first(self._list(ProgressSummary, student_id=student_id))

    def create_progress_summary(self, data: ProgressSummaryCreate) -> ProgressSummary:
        return self._create(ProgressSummary, data)

    # -----------------------------
    # Drill recommendations
    # -----------------------------
    def get_drill_recommendations(self, limit: int = 10) -> list[DrillRecommendation]:
        return _newest_first(self._list(DrillRecommendation))[:limit]

    def create_drill_recommendation(self, data: DrillRecommendationCreate) -> DrillRecommendation:
        return self._create(DrillRecommendation, data)

    # -----------------------------
    # Dashboard
    # -----------------------------
    def get_dashboard_stats(self, today: Optional[date] = None) -> DashboardStats:
        today = today or date.today()
        students = self._list(Student)
        return DashboardStats(
            sessions_today=sum(1 for s in self._list(Session) if s.date.date() == today),
            active_students=sum(1 for s in students if s.status == StudentStatus.ACTIVE),
            total_students=len(students),
            at_risk_students=sum(1 for s in students if s.status == StudentStatus.AT_RISK),
            average_improvement=self._average_improvement(students),
            day=today,
        )

    def _average_improvement(self, students: list[Student]) -> float:
        # Mean change of the overall score between each student's two latest assessments.
        deltas = []
        for student in students:
            assessments = self.get_skill_assessments(student.id)
            if len(assessments) >= 2:
                deltas.append(assessments[0].overall - assessments[1].overall)
        if not deltas:
            return 0.0
        return round(sum(deltas) / len(deltas), 1)
