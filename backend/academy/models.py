# backend/academy/models.py

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, Text, UniqueConstraint
from academy.db import Base

# Ids are handed out by the database; sqlite_autoincrement keeps SQLite from
# reusing the id of a deleted row.
_AUTOINCREMENT = {"sqlite_autoincrement": True}

# -------------------------------
# Users
# -------------------------------
class User(Base):
    __tablename__ = "users"
    __table_args__ = _AUTOINCREMENT
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)
    role = Column(String, nullable=False, default="coach")
    academy_name = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False)

# -------------------------------
# Batches
# -------------------------------
class Batch(Base):
    __tablename__ = "batches"
    __table_args__ = _AUTOINCREMENT
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    age_group = Column(String, nullable=False)
    level = Column(String, nullable=False)
    coach_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, nullable=False)

# -------------------------------
# Students
# -------------------------------
class Student(Base):
    __tablename__ = "students"
    __table_args__ = _AUTOINCREMENT
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    age = Column(Integer, nullable=False)
    email = Column(String)
    phone = Column(String)
    parent_name = Column(String)
    parent_phone = Column(String)
    batch_id = Column(Integer, ForeignKey("batches.id", ondelete="SET NULL"), index=True)
    profile_image_url = Column(String)
    status = Column(String, nullable=False, default="active")
    join_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False)

# -------------------------------
# Sessions
# -------------------------------
class Session(Base):
    __tablename__ = "sessions"
    __table_args__ = _AUTOINCREMENT
    id = Column(Integer, primary_key=True, autoincrement=True)
    batch_id = Column(Integer, ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(DateTime, nullable=False)
    duration = Column(Integer)  # minutes
    court = Column(String)
    status = Column(String, nullable=False, default="scheduled")
    notes = Column(Text)
    coach_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, nullable=False)

# -------------------------------
# Skill assessments
# -------------------------------
class SkillAssessment(Base):
    __tablename__ = "skill_assessments"
    __table_args__ = _AUTOINCREMENT
    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="SET NULL"))
    serve = Column(Integer, nullable=False)
    footwork = Column(Integer, nullable=False)
    stamina = Column(Integer, nullable=False)
    mental_focus = Column(Integer, nullable=False)
    overall = Column(Integer, nullable=False)
    notes = Column(Text)
    assessed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, nullable=False)

# -------------------------------
# Attendance
# -------------------------------
class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("session_id", "student_id", name="uix_attendance_session_student"),
        _AUTOINCREMENT,
    )
    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    present = Column(Boolean, nullable=False, default=False)
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False)

# -------------------------------
# Training plans
# -------------------------------
class TrainingPlan(Base):
    __tablename__ = "training_plans"
    __table_args__ = _AUTOINCREMENT
    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="SET NULL"), index=True)
    batch_id = Column(Integer, ForeignKey("batches.id", ondelete="SET NULL"), index=True)
    week = Column(Integer, nullable=False)
    focus_areas = Column(JSON, nullable=False, default=list)
    drills = Column(JSON)  # tagged generated content, see schemas.PlanContent
    notes = Column(Text)
    status = Column(String, nullable=False, default="generated")
    generated_by = Column(String, nullable=False, default="ai")
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, nullable=False)

# -------------------------------
# Progress summaries
# -------------------------------
class ProgressSummary(Base):
    __tablename__ = "progress_summaries"
    __table_args__ = _AUTOINCREMENT
    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    week = Column(Integer, nullable=False)
    summary = Column(Text, nullable=False)
    improvements = Column(JSON, nullable=False, default=list)
    concerns = Column(JSON, nullable=False, default=list)
    recommendations = Column(JSON, nullable=False, default=list)
    next_week_focus = Column(JSON, nullable=False, default=list)
    generated_by = Column(String, nullable=False, default="ai")
    created_at = Column(DateTime, nullable=False)

# -------------------------------
# Drill recommendations
# -------------------------------
class DrillRecommendation(Base):
    __tablename__ = "drill_recommendations"
    __table_args__ = _AUTOINCREMENT
    id = Column(Integer, primary_key=True, autoincrement=True)
    query = Column(Text, nullable=False)
    recommendations = Column(JSON)  # tagged generated content, see schemas.DrillListContent
    age_group = Column(String)
    skill_level = Column(String)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, nullable=False)
