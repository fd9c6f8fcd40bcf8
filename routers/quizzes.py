"""
Quiz router (admin only).
Quizzes are created under an exam and edited by their own id.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.database import get_db
from database.schemas import QuizCreate, QuizUpdate
from routers.auth import require_admin
from routers.serializers import quiz_dict
from services import content
from services.identity import Identity

router = APIRouter(prefix="/admin", tags=["quizzes"])


@router.get("/exams/{exam_id}/quizzes")
def list_quizzes(exam_id: int, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    return [quiz_dict(q) for q in content.list_quizzes(db, exam_id)]


@router.post("/exams/{exam_id}/quizzes", status_code=201)
def create_quiz(exam_id: int, request: QuizCreate, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    """Create a quiz and append it to the exam."""
    return quiz_dict(content.create_quiz(db, exam_id, request, admin.user_id))


@router.get("/quizzes/{quiz_id}")
def get_quiz(quiz_id: int, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    return quiz_dict(content.get_quiz(db, quiz_id))


@router.put("/quizzes/{quiz_id}")
def update_quiz(quiz_id: int, request: QuizUpdate, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    return quiz_dict(content.update_quiz(db, quiz_id, request))


@router.delete("/quizzes/{quiz_id}")
def delete_quiz(quiz_id: int, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    content.delete_quiz(db, quiz_id)
    return {"message": "Quiz removed", "quiz_id": quiz_id}
