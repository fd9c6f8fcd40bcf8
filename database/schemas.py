"""
Pydantic schemas for request validation
Separate from SQLAlchemy models for clean API contracts
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from database.models import Role, check_question_options


# ==========================================
# AUTH SCHEMAS
# ==========================================

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, description="At least 6 characters")
    role: Role = Role.STUDENT


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: dict


# ==========================================
# QUIZ / QUESTION SCHEMAS
# ==========================================

class OptionIn(BaseModel):
    text: str = Field(..., min_length=1)
    is_correct: bool = False


class QuestionIn(BaseModel):
    """Exactly four options, exactly one correct."""
    question: str = Field(..., min_length=1, description="Question text")
    options: List[OptionIn]
    marks: int = Field(1, ge=1, description="Marks awarded for a correct answer")

    @model_validator(mode="after")
    def _one_correct_of_four(self):
        check_question_options([o.model_dump() for o in self.options])
        return self


class QuizCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    time_limit_minutes: int = Field(5, ge=1, le=600)
    questions: List[QuestionIn] = Field(..., min_length=1)


class QuizUpdate(BaseModel):
    """All fields optional; questions, when given, replace the whole list."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    time_limit_minutes: Optional[int] = Field(None, ge=1, le=600)
    questions: Optional[List[QuestionIn]] = Field(None, min_length=1)


# ==========================================
# EXAM SCHEMAS
# ==========================================

class ExamCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    scheduled_at: datetime
    duration_minutes: int = Field(..., gt=0, le=1440)
    max_students: int = Field(..., gt=0)
    special_requirements: Optional[str] = None
    coordinator_id: Optional[int] = None
    is_active: bool = True


class ExamUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    scheduled_at: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(None, gt=0, le=1440)
    max_students: Optional[int] = Field(None, gt=0)
    special_requirements: Optional[str] = None
    coordinator_id: Optional[int] = None
    is_active: Optional[bool] = None


# ==========================================
# ATTEMPT / RESULT SCHEMAS
# ==========================================

class AnswerIn(BaseModel):
    question_id: int
    selected_option_index: int


class SubmitRequest(BaseModel):
    answers: List[AnswerIn] = Field(default_factory=list)
    additional_details: Optional[Dict[str, Any]] = None


class FeedbackRequest(BaseModel):
    feedback: str = Field(..., min_length=1)

    @field_validator("feedback")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Feedback must not be blank")
        return value


class ResultDetailsRequest(BaseModel):
    additional_details: Dict[str, Any]
