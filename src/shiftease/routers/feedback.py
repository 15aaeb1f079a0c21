"""Feedback router"""

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from shiftease.auth.dependencies import get_optional_caller, require_admin
from shiftease.auth.models import Caller
from shiftease.models.database import get_db
from shiftease.models.feedback import FeedbackCreate
from shiftease.services.feedback_service import FeedbackService

router = APIRouter(prefix="/feedback", tags=["Feedback"])


class FeedbackOut(BaseModel):
    id: uuid.UUID
    user_id: str
    user_email: str
    rating: int
    feedback: str
    created_at: Optional[datetime] = None


@router.post("", response_model=FeedbackOut, status_code=201, summary="Send feedback")
def submit_feedback(
    data: FeedbackCreate,
    caller: Optional[Caller] = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    entry = FeedbackService(db).submit(data, caller)
    return FeedbackOut.model_validate(entry, from_attributes=True)


@router.get("", response_model=List[FeedbackOut], summary="List feedback")
def list_feedback(
    _: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return [
        FeedbackOut.model_validate(entry, from_attributes=True)
        for entry in FeedbackService(db).list_feedback()
    ]
