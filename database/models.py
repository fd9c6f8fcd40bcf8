"""
SQLAlchemy models for the exam portal
User → Exam → Quiz → Question, plus Result (one attempt) and Notification

Exam/Quiz/Question are the stored truth for grading.
Result rows carry the attempt lifecycle: in progress until completed.
"""

import enum

from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, DateTime, Text, JSON,
    CheckConstraint, Index, Enum as SQLEnum, text,
)
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from database.database import Base

OPTIONS_PER_QUESTION = 4


class Role(str, enum.Enum):
    """The two account roles. Authorization compares against these, never free strings."""
    ADMIN = "admin"
    STUDENT = "student"


class AttemptState(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


class NotificationType(str, enum.Enum):
    EXAM_ADDED = "exam_added"
    EXAM_UPDATED = "exam_updated"
    RESULT_AVAILABLE = "result_available"
    FEEDBACK_ADDED = "feedback_added"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


def check_question_options(options) -> None:
    """
    Raise ValueError unless `options` is a list of exactly four
    {text, is_correct} entries with exactly one marked correct.
    """
    if not isinstance(options, list) or len(options) != OPTIONS_PER_QUESTION:
        raise ValueError(f"Each question must have exactly {OPTIONS_PER_QUESTION} options")
    correct = 0
    for option in options:
        if not isinstance(option, dict) or not str(option.get("text") or "").strip():
            raise ValueError("Each option must have text")
        if option.get("is_correct") is True:
            correct += 1
    if correct != 1:
        raise ValueError("Each question must have exactly one correct answer")


# ==========================================
# AUTH: USERS
# ==========================================

class User(Base):
    """
    Account for both roles.
    email is stored lower-cased; role is fixed at registration.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(Role, name="user_role", values_callable=_enum_values),
        nullable=False,
        default=Role.STUDENT,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"


# ==========================================
# CONTENT: EXAM → QUIZ → QUESTION
# ==========================================

class Exam(Base):
    """
    Scheduled container of quizzes.
    duration_minutes is the per-attempt time limit enforced at submit.
    """
    __tablename__ = "exams"
    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="ck_exams_duration_positive"),
        CheckConstraint("max_students > 0", name="ck_exams_max_students_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    scheduled_at = Column(DateTime(timezone=True), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False)
    max_students = Column(Integer, nullable=False)
    special_requirements = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, server_default=text("true"))
    coordinator_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    coordinator = relationship("User", foreign_keys=[coordinator_id])
    creator = relationship("User", foreign_keys=[created_by])
    quizzes = relationship(
        "Quiz", back_populates="exam", order_by="Quiz.position", cascade="all, delete-orphan",
    )
    results = relationship("Result", back_populates="exam", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Exam(id={self.id}, title='{self.title}', active={self.is_active})>"


class Quiz(Base):
    """Named group of questions inside an exam; position keeps the exam's quiz order."""
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    time_limit_minutes = Column(Integer, nullable=False, default=5)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    exam = relationship("Exam", back_populates="quizzes")
    questions = relationship(
        "Question", back_populates="quiz", order_by="Question.position", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Quiz(id={self.id}, exam_id={self.exam_id}, title='{self.title}')>"


class Question(Base):
    """
    Multiple-choice question.
    options: [{"text": "...", "is_correct": false}, ...], exactly four, exactly one correct.
    """
    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint("marks > 0", name="ck_questions_marks_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)
    marks = Column(Integer, nullable=False, default=1)

    quiz = relationship("Quiz", back_populates="questions")

    @validates("options")
    def _validate_options(self, key, options):
        check_question_options(options)
        return options

    @validates("marks")
    def _validate_marks(self, key, marks):
        if marks is None or int(marks) <= 0:
            raise ValueError("Question marks must be a positive integer")
        return int(marks)

    def __repr__(self):
        return f"<Question(id={self.id}, quiz_id={self.quiz_id}, marks={self.marks})>"


# ==========================================
# ATTEMPTS: RESULT + PER-ANSWER RECORDS
# ==========================================

class Result(Base):
    """
    One student's attempt at one exam.
    completed=false while in progress; at most one such row per (student, exam).
    """
    __tablename__ = "results"
    __table_args__ = (
        Index(
            "uq_results_active_attempt",
            "student_id", "exam_id",
            unique=True,
            postgresql_where=text("completed = false"),
            sqlite_where=text("completed = 0"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    total_score = Column(Integer, nullable=False, default=0)
    max_possible_score = Column(Integer, nullable=False, default=0)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    feedback = Column(Text, nullable=True)
    additional_details = Column(JSON, nullable=True)
    pdf_generated = Column(Boolean, nullable=False, default=False)
    pdf_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    student = relationship("User")
    exam = relationship("Exam", back_populates="results")
    answers = relationship("ResultAnswer", back_populates="result", cascade="all, delete-orphan")

    @property
    def state(self) -> AttemptState:
        return AttemptState.SUBMITTED if self.completed else AttemptState.IN_PROGRESS

    def __repr__(self):
        return f"<Result(id={self.id}, exam_id={self.exam_id}, student_id={self.student_id}, completed={self.completed})>"


class ResultAnswer(Base):
    """Graded answer for one question within a result."""
    __tablename__ = "result_answers"

    id = Column(Integer, primary_key=True, index=True)
    result_id = Column(Integer, ForeignKey("results.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="SET NULL"), nullable=True, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="SET NULL"), nullable=True, index=True)
    selected_option_index = Column(Integer, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    marks = Column(Integer, nullable=False, default=0)

    result = relationship("Result", back_populates="answers")

    def __repr__(self):
        return f"<ResultAnswer(result_id={self.result_id}, q_id={self.question_id}, correct={self.is_correct})>"


# ==========================================
# NOTIFICATIONS
# ==========================================

class Notification(Base):
    """Best-effort message to a student about an exam or result event."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(
        SQLEnum(NotificationType, name="notification_type", values_callable=_enum_values),
        nullable=False,
    )
    message = Column(Text, nullable=False)
    related_to = Column(Integer, nullable=True)
    on_model = Column(String(20), nullable=True)  # "Exam" or "Result"
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User")

    def __repr__(self):
        return f"<Notification(id={self.id}, user_id={self.user_id}, type='{self.type}')>"
