"""
Results router.
Students see their own results; admins see everything, add feedback, and
either side can have a certificate rendered for a submitted attempt.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.database import get_db
from database.schemas import FeedbackRequest
from routers.auth import get_current_identity, require_admin, require_student
from routers.serializers import result_dict
from services import results
from services.identity import Identity

router = APIRouter(prefix="/results", tags=["results"])


@router.get("/student")
def my_results(student: Identity = Depends(require_student), db: Session = Depends(get_db)):
    return [result_dict(r) for r in results.list_student_results(db, student.user_id)]


@router.get("/admin/exam/{exam_id}")
def exam_results(exam_id: int, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    """Every attempt at an exam, highest score first."""
    return [result_dict(r) for r in results.list_exam_results(db, exam_id)]


@router.get("/{result_id}")
def get_result(result_id: int, current: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return result_dict(results.get_result(db, result_id, current))


@router.put("/{result_id}/feedback")
def add_feedback(
    result_id: int,
    request: FeedbackRequest,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return result_dict(results.add_feedback(db, result_id, request.feedback))


@router.post("/{result_id}/generate-pdf")
def generate_pdf(result_id: int, current: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    result = results.render_certificate(db, result_id, current)
    return {"success": True, "pdf_url": result.pdf_url}
