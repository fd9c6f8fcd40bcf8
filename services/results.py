"""
Result / reporting service: listing, access checks, feedback, student details
and certificates.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session, joinedload

from database.models import NotificationType, Result
from services import certificate, notifications
from services.content import get_exam
from services.errors import Forbidden, NotFound, ValidationError
from services.identity import Identity

log = logging.getLogger(__name__)


def _load_result(db: Session, result_id: int) -> Result:
    result = (
        db.query(Result)
        .options(joinedload(Result.exam), joinedload(Result.student), joinedload(Result.answers))
        .filter(Result.id == result_id)
        .first()
    )
    if not result:
        raise NotFound("Result not found")
    return result


def _check_access(result: Result, identity: Identity) -> None:
    if not identity.is_admin and result.student_id != identity.user_id:
        raise Forbidden("User not authorized")


def list_student_results(db: Session, student_id: int) -> List[Result]:
    return (
        db.query(Result)
        .options(joinedload(Result.exam))
        .filter(Result.student_id == student_id)
        .order_by(Result.start_time.desc(), Result.id.desc())
        .all()
    )


def list_exam_results(db: Session, exam_id: int) -> List[Result]:
    get_exam(db, exam_id)
    return (
        db.query(Result)
        .options(joinedload(Result.student))
        .filter(Result.exam_id == exam_id)
        .order_by(Result.total_score.desc(), Result.id.asc())
        .all()
    )


def get_result(db: Session, result_id: int, identity: Identity) -> Result:
    """Owner or admin only."""
    result = _load_result(db, result_id)
    _check_access(result, identity)
    return result


def add_feedback(db: Session, result_id: int, text: str) -> Result:
    """Replace the instructor feedback on a result."""
    result = _load_result(db, result_id)
    result.feedback = text
    db.commit()
    db.refresh(result)
    log.info(f"[FEEDBACK] result={result.id} updated")

    notifications.notify(
        db, result.student_id, NotificationType.FEEDBACK_ADDED,
        f"New feedback on your {result.exam.title} result",
        related_to=result.id, on_model="Result",
    )
    return result


def render_certificate(db: Session, result_id: int, identity: Identity) -> Result:
    """Write the certificate file for a submitted result and record its URL."""
    result = get_result(db, result_id, identity)
    if not result.completed:
        raise ValidationError("Exam has not been submitted yet")

    certificate.write_certificate(result)
    result.pdf_generated = True
    result.pdf_url = certificate.certificate_url(result.id)
    db.commit()
    db.refresh(result)
    return result


def set_additional_details(db: Session, result_id: int, identity: Identity, details: Dict[str, Any]) -> Result:
    """
    Replace the student-entered details on a submitted result. Owner only.
    An existing certificate is re-rendered so it carries the new details.
    """
    result = _load_result(db, result_id)
    if result.student_id != identity.user_id:
        raise Forbidden("Not authorized")
    if not result.completed:
        raise ValidationError("Exam has not been submitted yet")

    result.additional_details = dict(details)
    if result.pdf_generated:
        certificate.write_certificate(result)
    db.commit()
    db.refresh(result)
    log.info(f"[DETAILS] result={result.id} keys={sorted(result.additional_details)}")
    return result
