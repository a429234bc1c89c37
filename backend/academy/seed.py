# backend/academy/seed.py

import structlog

from academy.auth import hash_password
from academy.schemas import (
    BatchCreate,
    SkillAssessmentCreate,
    StudentCreate,
    UserCreate,
)
from academy.storage.base import Storage

logger = structlog.get_logger(__name__)

ACADEMY_NAME = "Elite Tennis Academy"


def seed_sample_data(storage: Storage) -> bool:
    """Load the demo academy into an empty store. Returns False if users already exist."""
    if storage.get_user_by_username("admin@academy.com") is not None:
        return False

    coach = storage.create_user(UserCreate(
        username="coach@academy.com",
        password=hash_password("password123"),
        role="coach",
        academy_name=ACADEMY_NAME,
    ))
    storage.create_user(UserCreate(
        username="admin@academy.com",
        password=hash_password("admin123"),
        role="admin",
        academy_name=ACADEMY_NAME,
    ))
    storage.create_user(UserCreate(
        username="coach.sarah@academy.com",
        password=hash_password("password123"),
        role="coach",
        academy_name=ACADEMY_NAME,
    ))

    junior = storage.create_batch(BatchCreate(name="Junior Batch", age_group="12-16", level="intermediate", coach_id=coach.id))
    senior = storage.create_batch(BatchCreate(name="Senior Batch", age_group="16-18", level="advanced", coach_id=coach.id))
    storage.create_batch(BatchCreate(name="Beginner Batch", age_group="8-12", level="beginner", coach_id=coach.id))

    students = [
        StudentCreate(
            name="Aanya Sharma", age=14, email="aanya@email.com", phone="+91-9876543210",
            parent_name="Raj Sharma", parent_phone="+91-9876543211", batch_id=junior.id,
        ),
        StudentCreate(
            name="Rahul Kumar", age=16, email="rahul@email.com", phone="+91-9876543212",
            parent_name="Suresh Kumar", parent_phone="+91-9876543213", batch_id=senior.id,
            status="at_risk",
        ),
        StudentCreate(
            name="Priya Patel", age=13, email="priya@email.com", phone="+91-9876543214",
            parent_name="Amit Patel", parent_phone="+91-9876543215", batch_id=junior.id,
        ),
    ]
    scores = [(7, 8, 6, 7), (5, 6, 4, 5), (6, 7, 7, 8)]

    for data, (serve, footwork, stamina, mental_focus) in zip(students, scores):
        student = storage.create_student(data)
        storage.create_skill_assessment(SkillAssessmentCreate(
            student_id=student.id,
            serve=serve,
            footwork=footwork,
            stamina=stamina,
            mental_focus=mental_focus,
            assessed_by=coach.id,
        ))

    logger.info("sample_data_seeded", students=len(students))
    return True
