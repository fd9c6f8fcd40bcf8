"""
Answer grading.

Pure functions of (stored questions, submitted answers); no database access.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from database.models import Question, Quiz


@dataclass(frozen=True)
class GradedAnswer:
    quiz_id: int
    question_id: int
    selected_option_index: int
    is_correct: bool
    marks: int


def max_possible_score(quizzes: Iterable[Quiz]) -> int:
    """Sum of every question's marks across the given quizzes."""
    return sum(q.marks for quiz in quizzes for q in quiz.questions)


def index_questions(quizzes: Iterable[Quiz]) -> Dict[int, Question]:
    return {q.id: q for quiz in quizzes for q in quiz.questions}


def is_correct_choice(question: Question, selected_option_index: int) -> bool:
    """An index outside the question's options counts as a wrong answer."""
    options = question.options or []
    if not 0 <= selected_option_index < len(options):
        return False
    return options[selected_option_index].get("is_correct") is True


def grade_answers(questions: Dict[int, Question], answers: Iterable) -> Tuple[List[GradedAnswer], int]:
    """
    Grade submitted answers against stored questions.

    `answers` items expose `question_id` and `selected_option_index`.
    Answers for unknown question ids are dropped. When a question is answered
    more than once, the last answer counts. Returns (graded answers in
    first-seen order, total score).
    """
    latest: Dict[int, int] = {}
    for answer in answers:
        if answer.question_id not in questions:
            continue
        latest[answer.question_id] = answer.selected_option_index

    graded = []
    for question_id, selected in latest.items():
        question = questions[question_id]
        correct = is_correct_choice(question, selected)
        graded.append(GradedAnswer(
            quiz_id=question.quiz_id,
            question_id=question_id,
            selected_option_index=selected,
            is_correct=correct,
            marks=question.marks if correct else 0,
        ))

    return graded, sum(g.marks for g in graded)


def percentage(total_score: int, max_score: int) -> int:
    if not max_score:
        return 0
    return round(total_score / max_score * 100)
