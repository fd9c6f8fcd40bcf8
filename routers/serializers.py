"""
Response builders shared by the routers.
Admin views include correct answers; student views never do.
"""

from typing import Optional

from database.models import Exam, Quiz, Result
from services import exam_session
from services.grading import percentage


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def exam_summary(exam: Exam) -> dict:
    return {
        "id": exam.id,
        "title": exam.title,
        "description": exam.description,
        "scheduled_at": _iso(exam.scheduled_at),
        "duration_minutes": exam.duration_minutes,
        "max_students": exam.max_students,
        "special_requirements": exam.special_requirements,
        "is_active": exam.is_active,
        "coordinator_id": exam.coordinator_id,
        "created_by": exam.created_by,
        "quiz_ids": [q.id for q in exam.quizzes],
        "created_at": _iso(exam.created_at),
        "updated_at": _iso(exam.updated_at),
    }


def quiz_dict(quiz: Quiz) -> dict:
    """Admin view, correct answers included."""
    return {
        "id": quiz.id,
        "exam_id": quiz.exam_id,
        "position": quiz.position,
        "title": quiz.title,
        "description": quiz.description,
        "time_limit_minutes": quiz.time_limit_minutes,
        "questions": [
            {
                "id": q.id,
                "question": q.text,
                "marks": q.marks,
                "options": [{"text": o["text"], "is_correct": o["is_correct"]} for o in q.options],
            }
            for q in quiz.questions
        ],
        "created_at": _iso(quiz.created_at),
        "updated_at": _iso(quiz.updated_at),
    }


def quiz_summary(quiz: Quiz) -> dict:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "time_limit_minutes": quiz.time_limit_minutes,
        "question_count": len(quiz.questions),
    }


def exam_detail(exam: Exam) -> dict:
    return {**exam_summary(exam), "quizzes": [quiz_dict(q) for q in exam.quizzes]}


def result_dict(result: Result) -> dict:
    data = {
        "id": result.id,
        "student_id": result.student_id,
        "exam_id": result.exam_id,
        "state": result.state.value,
        "completed": result.completed,
        "total_score": result.total_score,
        "max_possible_score": result.max_possible_score,
        "percentage": percentage(result.total_score, result.max_possible_score) if result.completed else None,
        "start_time": _iso(result.start_time),
        "end_time": _iso(result.end_time),
        "feedback": result.feedback,
        "additional_details": result.additional_details,
        "pdf_generated": result.pdf_generated,
        "pdf_url": result.pdf_url,
        "answers": [
            {
                "quiz_id": a.quiz_id,
                "question_id": a.question_id,
                "selected_option_index": a.selected_option_index,
                "is_correct": a.is_correct,
                "marks": a.marks,
            }
            for a in result.answers
        ],
    }
    if result.exam is not None:
        data["exam"] = {
            "id": result.exam.id,
            "title": result.exam.title,
            "scheduled_at": _iso(result.exam.scheduled_at),
            "duration_minutes": result.exam.duration_minutes,
        }
    if result.student is not None:
        data["student"] = {"id": result.student.id, "name": result.student.name, "email": result.student.email}
    return data


def attempt_dict(attempt: "exam_session.Attempt") -> dict:
    return {
        "result": result_dict(attempt.result),
        "exam": exam_session.sanitized_exam(attempt.exam),
        "resumed": attempt.resumed,
        "deadline": attempt.deadline.isoformat(),
        "remaining_seconds": attempt.remaining_seconds(),
    }


def student_exam_entry(exam: Exam, result: Optional[Result]) -> dict:
    return {
        **exam_summary(exam),
        "taken": result is not None,
        "result_id": result.id if result else None,
        "status": exam_session.attempt_state(result).value,
    }
