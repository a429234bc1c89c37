"""Relational storage backend on SQLAlchemy."""

from typing import Any, Optional

import structlog

from academy import models, schemas
from academy.db import Base, create_engine_and_session
from academy.storage.base import RecordT, Storage

logger = structlog.get_logger(__name__)

# Record schema -> ORM model
MODELS = {
    schemas.User: models.User,
    schemas.Batch: models.Batch,
    schemas.Student: models.Student,
    schemas.SkillAssessment: models.SkillAssessment,
    schemas.Session: models.Session,
    schemas.Attendance: models.Attendance,
    schemas.TrainingPlan: models.TrainingPlan,
    schemas.ProgressSummary: models.ProgressSummary,
    schemas.DrillRecommendation: models.DrillRecommendation,
}


class SqlStorage(Storage):
    """Storage on a relational database. One session is opened per primitive."""

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.engine, self.session_local = create_engine_and_session(database_url, echo=echo)
        # Create database tables if they don't exist
        Base.metadata.create_all(bind=self.engine)
        logger.info("sql_storage_ready", dialect=self.engine.dialect.name)

    def _insert(self, entity: type[RecordT], values: dict[str, Any]) -> RecordT:
        with self.session_local() as db:
            row = MODELS[entity](**values)
            db.add(row)
            db.commit()
            db.refresh(row)
            return entity.model_validate(row)

    def _get(self, entity: type[RecordT], record_id: int) -> Optional[RecordT]:
        with self.session_local() as db:
            row = db.get(MODELS[entity], record_id)
            return entity.model_validate(row) if row is not None else None

    def _update(self, entity: type[RecordT], record_id: int, values: dict[str, Any]) -> Optional[RecordT]:
        with self.session_local() as db:
            row = db.get(MODELS[entity], record_id)
            if row is None:
                return None
            for field, value in values.items():
                setattr(row, field, value)
            db.commit()
            db.refresh(row)
            return entity.model_validate(row)

    def _delete(self, entity: type[RecordT], record_id: int) -> bool:
        with self.session_local() as db:
            row = db.get(MODELS[entity], record_id)
            if row is None:
                return False
            db.delete(row)
            db.commit()
            return True

    def _list(self, entity: type[RecordT], **equals: Any) -> list[RecordT]:
        model = MODELS[entity]
        with self.session_local() as db:
            rows = db.query(model).filter_by(**equals).order_by(model.id).all()
            return [entity.model_validate(row) for row in rows]
