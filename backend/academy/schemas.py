# backend/academy/schemas.py

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Annotated, ClassVar, Literal, Optional, List, Union
from datetime import date, datetime
from enum import Enum
import math


class Record(BaseModel):
    class Config:
        from_attributes = True
        use_enum_values = True


class PartialUpdate(Record):
    # Fields that may be left out of an update but never set to null.
    non_nullable: ClassVar[tuple] = ()

    @model_validator(mode="after")
    def _reject_null_required(self):
        nulled = [f for f in self.non_nullable if f in self.model_fields_set and getattr(self, f) is None]
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self


# -------------------------------
# Enumerations
# -------------------------------
class Role(str, Enum):
    ADMIN = "admin"
    COACH = "coach"

class BatchLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

class StudentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    AT_RISK = "at_risk"

class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"

class PlanStatus(str, Enum):
    GENERATED = "generated"
    APPROVED = "approved"
    MODIFIED = "modified"

class GeneratedBy(str, Enum):
    AI = "ai"
    FALLBACK = "fallback"
    COACH = "coach"


def to_local_naive(value: datetime) -> datetime:
    """Drop tzinfo after converting to local time, so both backends store the same value."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


# -------------------------------
# User Schemas
# -------------------------------
class UserBase(Record):
    username: str
    role: Role = Role.COACH
    academy_name: str

class UserCreate(UserBase):
    password: str

class User(UserCreate):
    id: int
    created_at: datetime

class UserOut(UserBase):
    id: int
    created_at: datetime

# -------------------------------
# Batch Schemas
# -------------------------------
class BatchBase(Record):
    name: str
    age_group: str
    level: BatchLevel

class BatchCreate(BatchBase):
    coach_id: Optional[int] = None

class BatchUpdate(PartialUpdate):
    non_nullable: ClassVar[tuple] = ("name", "age_group", "level")

    name: Optional[str] = None
    age_group: Optional[str] = None
    level: Optional[BatchLevel] = None
    coach_id: Optional[int] = None

class Batch(BatchCreate):
    id: int
    created_at: datetime

# -------------------------------
# Skill Assessment Schemas
# -------------------------------
class SkillScores(Record):
    serve: int = Field(ge=1, le=10)
    footwork: int = Field(ge=1, le=10)
    stamina: int = Field(ge=1, le=10)
    mental_focus: int = Field(ge=1, le=10)


def overall_score(scores: SkillScores) -> int:
    # Half-up rounding of the mean of the four scores.
    mean = (scores.serve + scores.footwork + scores.stamina + scores.mental_focus) / 4
    return math.floor(mean + 0.5)


class SkillAssessmentCreate(SkillScores):
    student_id: int
    session_id: Optional[int] = None
    notes: Optional[str] = None
    assessed_by: Optional[int] = None

class SkillAssessment(SkillAssessmentCreate):
    id: int
    overall: int
    created_at: datetime

# -------------------------------
# Student Schemas
# -------------------------------
class StudentCreate(Record):
    name: str
    age: int = Field(ge=0)
    email: Optional[str] = None
    phone: Optional[str] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    batch_id: Optional[int] = None
    profile_image_url: Optional[str] = None
    status: StudentStatus = StudentStatus.ACTIVE

class StudentUpdate(PartialUpdate):
    non_nullable: ClassVar[tuple] = ("name", "age", "status")

    name: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)
    email: Optional[str] = None
    phone: Optional[str] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    batch_id: Optional[int] = None
    profile_image_url: Optional[str] = None
    status: Optional[StudentStatus] = None

class Student(StudentCreate):
    id: int
    join_date: datetime
    created_at: datetime

class StudentWithBatch(Student):
    batch: Optional[Batch] = None
    latest_skill_assessment: Optional[SkillAssessment] = None

# -------------------------------
# Session Schemas
# -------------------------------
class SessionBase(Record):
    batch_id: int
    date: datetime
    duration: Optional[int] = Field(default=None, ge=0)  # minutes
    court: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def _normalise_date(cls, value: datetime) -> datetime:
        return to_local_naive(value)

class SessionCreate(SessionBase):
    coach_id: int
    status: SessionStatus = SessionStatus.SCHEDULED

class SessionUpdate(PartialUpdate):
    non_nullable: ClassVar[tuple] = ("batch_id", "date", "status")

    batch_id: Optional[int] = None
    date: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, ge=0)
    court: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[SessionStatus] = None

    @field_validator("date")
    @classmethod
    def _normalise_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(value) if value is not None else None

class Session(SessionCreate):
    id: int
    created_at: datetime

# -------------------------------
# Attendance Schemas
# -------------------------------
class AttendanceCreate(Record):
    session_id: int
    student_id: int
    present: bool = False
    notes: Optional[str] = None

class AttendanceUpdate(Record):
    present: bool

class Attendance(AttendanceCreate):
    id: int
    created_at: datetime

class AttendanceWithStudent(Attendance):
    student: Optional[Student] = None

class SessionWithDetails(Session):
    batch: Optional[Batch] = None
    coach: Optional[UserOut] = None
    attendance: List[AttendanceWithStudent] = Field(default_factory=list)

# -------------------------------
# Generated content
# -------------------------------
class Drill(Record):
    name: str
    description: str
    duration: str
    difficulty: str
    equipment: List[str] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)

class PlanDay(Record):
    day: str
    drills: List[Drill] = Field(default_factory=list)
    notes: Optional[str] = None

class TrainingPlanWeek(Record):
    week: int = 1
    focus_areas: List[str] = Field(default_factory=list)
    days: List[PlanDay] = Field(default_factory=list)
    progress_goals: List[str] = Field(default_factory=list)

class ProgressInsight(Record):
    summary: str
    improvements: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    next_week_focus: List[str] = Field(default_factory=list)

class RetentionPlan(Record):
    risk_factors: List[str] = Field(default_factory=list)
    interventions: List[str] = Field(default_factory=list)
    timeline: str
    success_metrics: List[str] = Field(default_factory=list)

# Stored generated content is tagged by ``kind`` and versioned, so a stored
# blob always decodes into a known shape.
class WeeklyPlanContent(Record):
    kind: Literal["weekly_plan"] = "weekly_plan"
    version: int = 1
    plan: TrainingPlanWeek

class CoachDrillsContent(Record):
    kind: Literal["coach_drills"] = "coach_drills"
    version: int = 1
    drills: List[Drill] = Field(default_factory=list)

class DrillListContent(Record):
    kind: Literal["drill_list"] = "drill_list"
    version: int = 1
    drills: List[Drill] = Field(default_factory=list)

PlanContent = Annotated[Union[WeeklyPlanContent, CoachDrillsContent], Field(discriminator="kind")]

# -------------------------------
# Training Plan Schemas
# -------------------------------
class TrainingPlanBase(Record):
    student_id: Optional[int] = None
    batch_id: Optional[int] = None
    week: int = Field(ge=1)
    focus_areas: List[str] = Field(default_factory=list)
    drills: Optional[PlanContent] = None
    notes: Optional[str] = None
    status: PlanStatus = PlanStatus.GENERATED
    generated_by: GeneratedBy = GeneratedBy.AI
    created_by: Optional[int] = None

class TrainingPlanCreate(TrainingPlanBase):
    @model_validator(mode="after")
    def _requires_target(self):
        if self.student_id is None and self.batch_id is None:
            raise ValueError("either student_id or batch_id is required")
        return self

class TrainingPlanUpdate(PartialUpdate):
    non_nullable: ClassVar[tuple] = ("week", "focus_areas", "status")

    week: Optional[int] = Field(default=None, ge=1)
    focus_areas: Optional[List[str]] = None
    drills: Optional[PlanContent] = None
    notes: Optional[str] = None
    status: Optional[PlanStatus] = None

class TrainingPlan(TrainingPlanBase):
    id: int
    created_at: datetime

class TrainingPlanWithDetails(TrainingPlan):
    student: Optional[Student] = None
    batch: Optional[Batch] = None
    creator: Optional[UserOut] = None

class TrainingPlanGenerateRequest(BaseModel):
    student_id: Optional[int] = None
    batch_id: Optional[int] = None
    focus_areas: Optional[List[str]] = None

# -------------------------------
# Progress Summary Schemas
# -------------------------------
class ProgressSummaryCreate(Record):
    student_id: int
    week: int
    summary: str
    improvements: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    next_week_focus: List[str] = Field(default_factory=list)
    generated_by: GeneratedBy = GeneratedBy.AI

class ProgressSummary(ProgressSummaryCreate):
    id: int
    created_at: datetime

class ProgressSummaryGenerateRequest(BaseModel):
    student_id: int

# -------------------------------
# Drill Recommendation Schemas
# -------------------------------
class DrillQuery(BaseModel):
    query: str = Field(min_length=1)
    age_group: Optional[str] = None
    skill_level: Optional[str] = None

class DrillRecommendationCreate(Record):
    query: str
    recommendations: Optional[DrillListContent] = None
    age_group: Optional[str] = None
    skill_level: Optional[str] = None
    created_by: Optional[int] = None

class DrillRecommendation(DrillRecommendationCreate):
    id: int
    created_at: datetime

class DrillResponse(BaseModel):
    drills: List[Drill]

# -------------------------------
# Dashboard
# -------------------------------
class DashboardStats(BaseModel):
    sessions_today: int
    active_students: int
    total_students: int
    at_risk_students: int
    average_improvement: float
    day: date
