"""
Exam-session lifecycle: NOT_STARTED → IN_PROGRESS → SUBMITTED.

The server is authoritative for time: the deadline is start_time plus the
exam's duration, checked when the attempt is submitted. There is no
background expiry; an abandoned attempt stays in progress.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.models import AttemptState, Exam, NotificationType, Result, ResultAnswer
from services import clock, grading, notifications
from services.content import get_exam
from services.errors import (
    AlreadyCompleted, AlreadySubmitted, ExamInactive, ExamNotYetAvailable,
    NoActiveSession, TimeLimitExceeded,
)

log = logging.getLogger(__name__)


@dataclass
class Attempt:
    result: Result
    exam: Exam
    resumed: bool

    @property
    def deadline(self) -> datetime:
        return attempt_deadline(self.result, self.exam)

    def remaining_seconds(self, now: Optional[datetime] = None) -> int:
        now = clock.as_utc(now) if now else clock.now()
        return max(0, int((self.deadline - now).total_seconds()))


# ─── Helpers ───────────────────────────────────────────────────────────────────

def attempt_deadline(result: Result, exam: Exam) -> datetime:
    return clock.as_utc(result.start_time) + timedelta(minutes=exam.duration_minutes)


def attempt_state(result: Optional[Result]) -> AttemptState:
    """State of a student's attempt given their result row for the exam, if any."""
    return result.state if result else AttemptState.NOT_STARTED


def _active_result(db: Session, student_id: int, exam_id: int) -> Optional[Result]:
    return (
        db.query(Result)
        .filter(
            Result.student_id == student_id,
            Result.exam_id == exam_id,
            Result.completed.is_(False),
        )
        .first()
    )


def _completed_result(db: Session, student_id: int, exam_id: int) -> Optional[Result]:
    return (
        db.query(Result)
        .filter(
            Result.student_id == student_id,
            Result.exam_id == exam_id,
            Result.completed.is_(True),
        )
        .first()
    )


def sanitized_exam(exam: Exam) -> Dict[str, Any]:
    """Exam view for a student taking it: questions without any correctness data."""
    return {
        "id": exam.id,
        "title": exam.title,
        "description": exam.description,
        "duration_minutes": exam.duration_minutes,
        "quizzes": [
            {
                "id": quiz.id,
                "title": quiz.title,
                "description": quiz.description,
                "time_limit_minutes": quiz.time_limit_minutes,
                "questions": [
                    {
                        "id": q.id,
                        "question": q.text,
                        "marks": q.marks,
                        "options": [{"index": i, "text": o.get("text")} for i, o in enumerate(q.options)],
                    }
                    for q in quiz.questions
                ],
            }
            for quiz in exam.quizzes
        ],
    }


# ─── Transitions ───────────────────────────────────────────────────────────────

def start_attempt(db: Session, student_id: int, exam_id: int, now: Optional[datetime] = None) -> Attempt:
    """
    Begin or resume the student's attempt.
    Starting twice without submitting returns the same result, clock untouched.
    """
    now = clock.as_utc(now) if now else clock.now()
    exam = get_exam(db, exam_id)

    if not exam.is_active:
        raise ExamInactive()
    if now < clock.as_utc(exam.scheduled_at):
        raise ExamNotYetAvailable()
    if _completed_result(db, student_id, exam_id):
        raise AlreadyCompleted()

    existing = _active_result(db, student_id, exam_id)
    if existing:
        log.info(f"[START] resume result={existing.id} exam={exam_id} student={student_id}")
        return Attempt(result=existing, exam=exam, resumed=True)

    result = Result(
        student_id=student_id,
        exam_id=exam_id,
        start_time=now,
        max_possible_score=grading.max_possible_score(exam.quizzes),
        total_score=0,
        completed=False,
    )
    db.add(result)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent start; the unique index kept one row
        db.rollback()
        winner = _active_result(db, student_id, exam_id)
        if winner:
            log.info(f"[START] concurrent start, resume result={winner.id} exam={exam_id} student={student_id}")
            return Attempt(result=winner, exam=exam, resumed=True)
        if _completed_result(db, student_id, exam_id):
            raise AlreadyCompleted()
        raise
    db.refresh(result)

    log.info(f"[START] new result={result.id} exam={exam_id} student={student_id} max={result.max_possible_score}")
    return Attempt(result=result, exam=exam, resumed=False)


def submit_attempt(
    db: Session,
    student_id: int,
    exam_id: int,
    answers: Iterable,
    additional_details: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Result:
    """
    Grade and close the student's in-progress attempt. Terminal: a second
    submit fails with AlreadySubmitted and leaves the score alone.
    """
    now = clock.as_utc(now) if now else clock.now()

    result = _active_result(db, student_id, exam_id)
    if not result:
        if _completed_result(db, student_id, exam_id):
            raise AlreadySubmitted()
        raise NoActiveSession()
    result_id = result.id

    exam = get_exam(db, exam_id)
    elapsed = now - clock.as_utc(result.start_time)
    if elapsed > timedelta(minutes=exam.duration_minutes):
        log.info(f"[SUBMIT] late result={result.id} elapsed={int(elapsed.total_seconds())}s limit={exam.duration_minutes}m")
        raise TimeLimitExceeded()

    graded, total = grading.grade_answers(grading.index_questions(exam.quizzes), answers)

    # close only if still open; a concurrent submit that got here first wins
    closed = (
        db.query(Result)
        .filter(Result.id == result_id, Result.completed.is_(False))
        .update(
            {
                Result.completed: True,
                Result.total_score: total,
                Result.end_time: now,
                Result.additional_details: additional_details or {},
            },
            synchronize_session=False,
        )
    )
    if not closed:
        db.rollback()
        log.info(f"[SUBMIT] result={result_id} already closed by another submit")
        raise AlreadySubmitted()

    db.add_all([
        ResultAnswer(
            result_id=result_id,
            quiz_id=g.quiz_id,
            question_id=g.question_id,
            selected_option_index=g.selected_option_index,
            is_correct=g.is_correct,
            marks=g.marks,
        )
        for g in graded
    ])
    db.commit()
    db.refresh(result)

    log.info(f"[SUBMIT] result={result.id} exam={exam_id} student={student_id} score={total}/{result.max_possible_score} answers={len(graded)}")

    notifications.notify(
        db, student_id, NotificationType.RESULT_AVAILABLE,
        f"Your result for {exam.title} is available",
        related_to=result.id, on_model="Result",
    )
    return result
