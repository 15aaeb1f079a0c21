"""SQLModel Feedback model"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field as PydanticField, field_validator
from sqlalchemy import CheckConstraint, Column, DateTime, Text
from sqlmodel import Field, SQLModel

FEEDBACK_MAX_LENGTH = 300
ANONYMOUS = "anonymous"


class Feedback(SQLModel, table=True):
    """Free-text feedback with a 1-5 rating"""

    __tablename__ = "feedback"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: str = Field(default=ANONYMOUS, index=True)
    user_email: str = Field(default=ANONYMOUS)
    rating: int
    feedback: str = Field(sa_column=Column(Text, nullable=False))
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
    )

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_feedback_rating_1_5"),
    )


class FeedbackCreate(BaseModel):
    rating: int = PydanticField(default=3, ge=1, le=5)
    feedback: str

    @field_validator("feedback")
    @classmethod
    def _validate_feedback(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Feedback text is required")
        if len(v) > FEEDBACK_MAX_LENGTH:
            raise ValueError(
                f"Feedback must be at most {FEEDBACK_MAX_LENGTH} characters"
            )
        return v
