"""
Content repository: exam and quiz CRUD.

Quiz creation and exam deletion run as single transactions, so an exam never
ends up without its new quiz in the list, and a failed cascade leaves nothing
half-deleted.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from database import schemas
from database.models import Exam, NotificationType, Question, Quiz, Result, User
from services import clock, notifications
from services.errors import ExamInactive, NotFound

log = logging.getLogger(__name__)

# Exam columns that accept an explicit null on update
_NULLABLE_EXAM_FIELDS = {"special_requirements", "coordinator_id"}


# ==========================================
# EXAMS
# ==========================================

def _require_user(db: Session, user_id: int, label: str) -> None:
    if not db.query(User.id).filter(User.id == user_id).first():
        raise NotFound(f"{label} not found")


def get_exam(db: Session, exam_id: int) -> Exam:
    exam = (
        db.query(Exam)
        .options(joinedload(Exam.quizzes).joinedload(Quiz.questions))
        .filter(Exam.id == exam_id)
        .first()
    )
    if not exam:
        raise NotFound("Exam not found")
    return exam


def list_exams(db: Session) -> List[Exam]:
    """Admin listing: every exam, by date."""
    return db.query(Exam).order_by(Exam.scheduled_at.asc(), Exam.id.asc()).all()


def list_available_exams(db: Session, student_id: int, now: Optional[datetime] = None) -> List[Tuple[Exam, Optional[Result]]]:
    """
    Student listing: active exams scheduled today or later.
    Each exam is paired with the student's result for it, if any.
    """
    today = clock.start_of_day(now or clock.now())
    exams = (
        db.query(Exam)
        .filter(Exam.is_active.is_(True), Exam.scheduled_at >= today)
        .order_by(Exam.scheduled_at.asc(), Exam.id.asc())
        .all()
    )
    if not exams:
        return []

    results = (
        db.query(Result)
        .filter(Result.student_id == student_id, Result.exam_id.in_([e.id for e in exams]))
        .all()
    )
    result_map = {r.exam_id: r for r in results}
    return [(exam, result_map.get(exam.id)) for exam in exams]


def get_exam_for_student(db: Session, student_id: int, exam_id: int) -> Tuple[Exam, Optional[Result]]:
    exam = get_exam(db, exam_id)
    if not exam.is_active:
        raise ExamInactive()
    result = (
        db.query(Result)
        .filter(Result.student_id == student_id, Result.exam_id == exam_id)
        .order_by(Result.start_time.desc())
        .first()
    )
    return exam, result


def create_exam(db: Session, data: schemas.ExamCreate, creator_id: int) -> Exam:
    if data.coordinator_id is not None:
        _require_user(db, data.coordinator_id, "Coordinator")

    exam = Exam(
        title=data.title,
        description=data.description,
        scheduled_at=clock.as_utc(data.scheduled_at),
        duration_minutes=data.duration_minutes,
        max_students=data.max_students,
        special_requirements=data.special_requirements,
        coordinator_id=data.coordinator_id,
        is_active=data.is_active,
        created_by=creator_id,
    )
    db.add(exam)
    db.commit()
    db.refresh(exam)
    log.info(f"[EXAM] created id={exam.id} by user={creator_id}")

    notifications.notify_students(
        db, NotificationType.EXAM_ADDED, f"New exam scheduled: {exam.title}",
        related_to=exam.id, on_model="Exam",
    )
    return exam


def update_exam(db: Session, exam_id: int, data: schemas.ExamUpdate) -> Exam:
    """Partial update: only fields present in the request change."""
    exam = get_exam(db, exam_id)

    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field not in _NULLABLE_EXAM_FIELDS:
            continue
        if field == "coordinator_id" and value is not None:
            _require_user(db, value, "Coordinator")
        if field == "scheduled_at":
            value = clock.as_utc(value)
        setattr(exam, field, value)

    db.commit()
    db.refresh(exam)
    log.info(f"[EXAM] updated id={exam.id} fields={sorted(changes)}")

    notifications.notify_students(
        db, NotificationType.EXAM_UPDATED, f"Exam updated: {exam.title}",
        related_to=exam.id, on_model="Exam",
    )
    return exam


def delete_exam(db: Session, exam_id: int) -> dict:
    """
    Ordered cascade in one transaction: quizzes, then results, then the exam.
    Returns how many rows of each kind were removed.
    """
    exam = get_exam(db, exam_id)
    try:
        quizzes = db.query(Quiz).filter(Quiz.exam_id == exam_id).all()
        for quiz in quizzes:
            db.delete(quiz)
        db.flush()

        results = db.query(Result).filter(Result.exam_id == exam_id).all()
        for result in results:
            db.delete(result)
        db.flush()

        db.expire(exam, ["quizzes", "results"])
        db.delete(exam)
        db.commit()
    except Exception:
        db.rollback()
        log.error(f"[CASCADE] delete of exam={exam_id} rolled back", exc_info=True)
        raise

    log.info(f"[CASCADE] exam={exam_id} removed with {len(quizzes)} quizzes and {len(results)} results")
    return {"exam_id": exam_id, "quizzes_deleted": len(quizzes), "results_deleted": len(results)}


# ==========================================
# QUIZZES
# ==========================================

def _build_questions(items: List[schemas.QuestionIn]) -> List[Question]:
    return [
        Question(
            position=idx,
            text=item.question,
            options=[{"text": o.text, "is_correct": o.is_correct} for o in item.options],
            marks=item.marks,
        )
        for idx, item in enumerate(items)
    ]


def get_quiz(db: Session, quiz_id: int) -> Quiz:
    quiz = (
        db.query(Quiz)
        .options(joinedload(Quiz.questions))
        .filter(Quiz.id == quiz_id)
        .first()
    )
    if not quiz:
        raise NotFound("Quiz not found")
    return quiz


def list_quizzes(db: Session, exam_id: int) -> List[Quiz]:
    return get_exam(db, exam_id).quizzes


def create_quiz(db: Session, exam_id: int, data: schemas.QuizCreate, creator_id: int) -> Quiz:
    """Create a quiz and append it to the exam's ordered quiz list."""
    exam = get_exam(db, exam_id)

    next_position = max((q.position for q in exam.quizzes), default=-1) + 1
    quiz = Quiz(
        title=data.title,
        description=data.description,
        time_limit_minutes=data.time_limit_minutes,
        position=next_position,
        created_by=creator_id,
        questions=_build_questions(data.questions),
    )
    exam.quizzes.append(quiz)
    db.commit()
    db.refresh(quiz)
    log.info(f"[QUIZ] created id={quiz.id} exam={exam_id} position={next_position} questions={len(quiz.questions)}")
    return quiz


def update_quiz(db: Session, quiz_id: int, data: schemas.QuizUpdate) -> Quiz:
    quiz = get_quiz(db, quiz_id)

    changes = data.model_dump(exclude_unset=True)
    if data.title is not None:
        quiz.title = data.title
    if data.description is not None:
        quiz.description = data.description
    if data.time_limit_minutes is not None:
        quiz.time_limit_minutes = data.time_limit_minutes
    if data.questions is not None:
        quiz.questions = _build_questions(data.questions)

    db.commit()
    db.refresh(quiz)
    log.info(f"[QUIZ] updated id={quiz.id} fields={sorted(changes)}")
    return quiz


def delete_quiz(db: Session, quiz_id: int) -> None:
    quiz = get_quiz(db, quiz_id)
    db.delete(quiz)
    db.commit()
    log.info(f"[QUIZ] deleted id={quiz_id}")
