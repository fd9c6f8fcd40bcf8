"""
One function per API endpoint. Each takes the ApiSession first.
"""

from typing import Any, Dict, List, Optional

from .session import ApiSession


# ─── Auth ──────────────────────────────────────────────────────────────────────

def register(session: ApiSession, name: str, email: str, password: str, role: str = "student") -> dict:
    data = session.post("/auth/register", {"name": name, "email": email, "password": password, "role": role})
    session.token = data["token"]
    return data


def login(session: ApiSession, email: str, password: str) -> dict:
    """Log in and keep the returned token on the session."""
    data = session.post("/auth/login", {"email": email, "password": password})
    session.token = data["token"]
    return data


def me(session: ApiSession) -> dict:
    return session.get("/auth/me")


# ─── Exams (admin) ─────────────────────────────────────────────────────────────

def list_exams(session: ApiSession) -> List[dict]:
    return session.get("/exams")


def create_exam(session: ApiSession, exam: Dict[str, Any]) -> dict:
    return session.post("/exams", exam)


def get_exam(session: ApiSession, exam_id: int) -> dict:
    return session.get(f"/exams/{exam_id}")


def update_exam(session: ApiSession, exam_id: int, changes: Dict[str, Any]) -> dict:
    return session.put(f"/exams/{exam_id}", changes)


def delete_exam(session: ApiSession, exam_id: int) -> dict:
    return session.delete(f"/exams/{exam_id}")


# ─── Quizzes (admin) ───────────────────────────────────────────────────────────

def list_quizzes(session: ApiSession, exam_id: int) -> List[dict]:
    return session.get(f"/admin/exams/{exam_id}/quizzes")


def create_quiz(session: ApiSession, exam_id: int, quiz: Dict[str, Any]) -> dict:
    return session.post(f"/admin/exams/{exam_id}/quizzes", quiz)


def get_quiz(session: ApiSession, quiz_id: int) -> dict:
    return session.get(f"/admin/quizzes/{quiz_id}")


def update_quiz(session: ApiSession, quiz_id: int, changes: Dict[str, Any]) -> dict:
    return session.put(f"/admin/quizzes/{quiz_id}", changes)


def delete_quiz(session: ApiSession, quiz_id: int) -> dict:
    return session.delete(f"/admin/quizzes/{quiz_id}")


# ─── Student ───────────────────────────────────────────────────────────────────

def available_exams(session: ApiSession) -> List[dict]:
    return session.get("/student/exams")


def student_exam(session: ApiSession, exam_id: int) -> dict:
    return session.get(f"/student/exams/{exam_id}")


def start_exam(session: ApiSession, exam_id: int) -> dict:
    return session.post(f"/exams/{exam_id}/start")


def submit_exam(
    session: ApiSession,
    exam_id: int,
    answers: List[Dict[str, int]],
    additional_details: Optional[Dict[str, Any]] = None,
) -> dict:
    return session.post(f"/exams/{exam_id}/submit", {"answers": answers, "additional_details": additional_details})


# ─── Results ───────────────────────────────────────────────────────────────────

def my_results(session: ApiSession) -> List[dict]:
    return session.get("/results/student")


def exam_results(session: ApiSession, exam_id: int) -> List[dict]:
    return session.get(f"/results/admin/exam/{exam_id}")


def get_result(session: ApiSession, result_id: int) -> dict:
    return session.get(f"/results/{result_id}")


def add_feedback(session: ApiSession, result_id: int, feedback: str) -> dict:
    return session.put(f"/results/{result_id}/feedback", {"feedback": feedback})


def generate_pdf(session: ApiSession, result_id: int) -> dict:
    return session.post(f"/results/{result_id}/generate-pdf")


def add_result_details(session: ApiSession, result_id: int, details: Dict[str, Any]) -> dict:
    return session.post(f"/student/results/{result_id}/details", {"additional_details": details})


# ─── Notifications ─────────────────────────────────────────────────────────────

def notifications(session: ApiSession) -> List[dict]:
    return session.get("/student/notifications")


def mark_notification_read(session: ApiSession, notification_id: int) -> dict:
    return session.put(f"/student/notifications/{notification_id}/read")


def mark_all_notifications_read(session: ApiSession) -> dict:
    return session.put("/student/notifications/mark-all-read")
