"""
A started exam attempt on the client side.

Answers are kept locally until submit. Manual submit and countdown expiry go
through the same submit() call, and only the first one reaches the server.
"""

import logging
from typing import Any, Dict, List, Optional

from . import api
from .countdown import ExamCountdown
from .session import ApiSession

log = logging.getLogger(__name__)


class ExamAttempt:
    def __init__(self, session: ApiSession, started: dict):
        self.session = session
        self.exam = started["exam"]
        self.result_id = started["result"]["id"]
        self.resumed = started.get("resumed", False)
        self.answers: Dict[int, int] = {}
        self.additional_details: Optional[Dict[str, Any]] = None
        self.result: Optional[dict] = None
        self.countdown = ExamCountdown.from_start_response(started, on_expired=self._on_expired)

    @classmethod
    def start(cls, session: ApiSession, exam_id: int) -> "ExamAttempt":
        """Start (or resume) the exam on the server."""
        return cls(session, api.start_exam(session, exam_id))

    @property
    def exam_id(self) -> int:
        return self.exam["id"]

    @property
    def submitted(self) -> bool:
        return self.result is not None

    def questions(self) -> List[dict]:
        return [q for quiz in self.exam["quizzes"] for q in quiz["questions"]]

    def answer(self, question_id: int, selected_option_index: int) -> None:
        """Record (or change) the answer to one question."""
        if self.submitted:
            raise RuntimeError("Attempt already submitted")
        self.answers[question_id] = selected_option_index

    def submit(self) -> dict:
        if self.submitted:
            return self.result
        payload = [{"question_id": qid, "selected_option_index": idx} for qid, idx in self.answers.items()]
        self.result = api.submit_exam(self.session, self.exam_id, payload, self.additional_details)
        log.info(f"[CLIENT] submitted exam={self.exam_id} score={self.result['total_score']}")
        return self.result

    def _on_expired(self) -> None:
        log.info(f"[CLIENT] time up for exam={self.exam_id}, submitting")
        self.submit()
