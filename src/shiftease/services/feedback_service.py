"""Feedback Service - stores and lists user feedback"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from shiftease.auth.models import Caller
from shiftease.errors import StoreUnavailable
from shiftease.models.feedback import ANONYMOUS, Feedback, FeedbackCreate

logger = logging.getLogger(__name__)


class FeedbackService:
    def __init__(self, db_session: Session):
        self.db = db_session

    def submit(self, data: FeedbackCreate, caller: Optional[Caller] = None) -> Feedback:
        """Store feedback; anonymous callers are recorded as ``anonymous``"""
        entry = Feedback(
            user_id=caller.user_id if caller else ANONYMOUS,
            user_email=(caller.email if caller else None) or ANONYMOUS,
            rating=data.rating,
            feedback=data.feedback,
        )
        try:
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error saving feedback: {e}")
            raise StoreUnavailable(f"Failed to save feedback: {str(e)}") from e

        logger.info(f"Feedback received from {entry.user_id} (rating {entry.rating})")
        return entry

    def list_feedback(self) -> List[Feedback]:
        """All feedback, newest first"""
        stmt = select(Feedback).order_by(Feedback.created_at.desc())
        return list(self.db.exec(stmt).all())
