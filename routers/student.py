"""
Student router.
Exam listing for students, the notification inbox, and certificate details
on their own results.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.database import get_db
from database.schemas import ResultDetailsRequest
from routers.auth import require_student
from routers.serializers import quiz_summary, result_dict, student_exam_entry
from services import content, notifications, results
from services.identity import Identity

router = APIRouter(prefix="/student", tags=["student"])


# ─── Exams ─────────────────────────────────────────────────────────────────────

@router.get("/exams")
def available_exams(student: Identity = Depends(require_student), db: Session = Depends(get_db)):
    """Active exams from today on, each marked with the student's own status."""
    return [
        student_exam_entry(exam, result)
        for exam, result in content.list_available_exams(db, student.user_id)
    ]


@router.get("/exams/{exam_id}")
def exam_overview(exam_id: int, student: Identity = Depends(require_student), db: Session = Depends(get_db)):
    exam, result = content.get_exam_for_student(db, student.user_id, exam_id)
    entry = student_exam_entry(exam, result)
    entry["quizzes"] = [quiz_summary(q) for q in exam.quizzes]
    return entry


# ─── Notifications ─────────────────────────────────────────────────────────────

@router.get("/notifications")
def list_notifications(student: Identity = Depends(require_student), db: Session = Depends(get_db)):
    return notifications.list_notifications(db, student.user_id)


@router.put("/notifications/mark-all-read")
def mark_all_read(student: Identity = Depends(require_student), db: Session = Depends(get_db)):
    return notifications.mark_all_read(db, student.user_id)


@router.put("/notifications/{notification_id}/read")
def mark_read(notification_id: int, student: Identity = Depends(require_student), db: Session = Depends(get_db)):
    return notifications.mark_read(db, student.user_id, notification_id)


# ─── Results ───────────────────────────────────────────────────────────────────

@router.post("/results/{result_id}/details")
def add_result_details(
    result_id: int,
    request: ResultDetailsRequest,
    student: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    """Attach or replace the details printed on the student's certificate."""
    result = results.set_additional_details(db, result_id, student, request.additional_details)
    return result_dict(result)
