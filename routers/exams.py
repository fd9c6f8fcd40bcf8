"""
Exam router.
Admins manage exams; students start and submit attempts against them.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.database import get_db
from database.schemas import ExamCreate, ExamUpdate, SubmitRequest
from routers.auth import require_admin, require_student
from routers.serializers import attempt_dict, exam_detail, exam_summary, result_dict
from services import content, exam_session
from services.identity import Identity

router = APIRouter(prefix="/exams", tags=["exams"])


# ─── Admin ─────────────────────────────────────────────────────────────────────

@router.get("")
def list_exams(admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    return [exam_summary(e) for e in content.list_exams(db)]


@router.post("", status_code=201)
def create_exam(request: ExamCreate, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    exam = content.create_exam(db, request, admin.user_id)
    return exam_summary(exam)


@router.get("/{exam_id}")
def get_exam(exam_id: int, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    """Full exam with quizzes, correct answers included."""
    return exam_detail(content.get_exam(db, exam_id))


@router.put("/{exam_id}")
def update_exam(exam_id: int, request: ExamUpdate, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    return exam_summary(content.update_exam(db, exam_id, request))


@router.delete("/{exam_id}")
def delete_exam(exam_id: int, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    """Remove the exam with all its quizzes and results."""
    removed = content.delete_exam(db, exam_id)
    return {"message": "Exam removed", **removed}


# ─── Student attempts ──────────────────────────────────────────────────────────

@router.post("/{exam_id}/start")
def start_exam(exam_id: int, student: Identity = Depends(require_student), db: Session = Depends(get_db)):
    """Start the exam, or resume the attempt already in progress."""
    attempt = exam_session.start_attempt(db, student.user_id, exam_id)
    return attempt_dict(attempt)


@router.post("/{exam_id}/submit")
def submit_exam(
    exam_id: int,
    request: SubmitRequest,
    student: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    result = exam_session.submit_attempt(
        db, student.user_id, exam_id, request.answers,
        additional_details=request.additional_details,
    )
    return result_dict(result)
