from types import SimpleNamespace

from database.models import Question, Quiz
from services import grading


def _question(qid, correct_index, marks=1, quiz_id=1):
    return Question(
        id=qid,
        quiz_id=quiz_id,
        position=0,
        text=f"Q{qid}",
        marks=marks,
        options=[{"text": f"opt {i}", "is_correct": i == correct_index} for i in range(4)],
    )


def _answer(question_id, index):
    return SimpleNamespace(question_id=question_id, selected_option_index=index)


def _questions():
    return {
        1: _question(1, 0, marks=2),
        2: _question(2, 3, marks=1),
        3: _question(3, 1, marks=5, quiz_id=2),
    }


def test_max_possible_score_sums_every_question():
    quizzes = [
        Quiz(questions=[_question(1, 0, marks=2), _question(2, 1, marks=1)]),
        Quiz(questions=[_question(3, 2, marks=5)]),
    ]
    assert grading.max_possible_score(quizzes) == 8


def test_correct_answers_earn_their_marks():
    graded, total = grading.grade_answers(_questions(), [_answer(1, 0), _answer(2, 0), _answer(3, 1)])

    assert total == 7
    assert [g.is_correct for g in graded] == [True, False, True]
    assert [g.marks for g in graded] == [2, 0, 5]
    assert graded[2].quiz_id == 2


def test_unknown_questions_are_dropped():
    graded, total = grading.grade_answers(_questions(), [_answer(42, 0), _answer(1, 0)])

    assert [g.question_id for g in graded] == [1]
    assert total == 2


def test_last_answer_for_a_question_wins():
    graded, total = grading.grade_answers(_questions(), [_answer(1, 0), _answer(2, 3), _answer(1, 2)])

    assert [g.question_id for g in graded] == [1, 2]
    assert graded[0].selected_option_index == 2
    assert graded[0].is_correct is False
    assert total == 1


def test_out_of_range_option_is_wrong():
    questions = _questions()

    assert grading.is_correct_choice(questions[1], 4) is False
    assert grading.is_correct_choice(questions[1], -1) is False
    graded, total = grading.grade_answers(questions, [_answer(1, 17)])
    assert graded[0].is_correct is False
    assert total == 0


def test_score_never_exceeds_maximum():
    questions = _questions()
    answers = [_answer(1, 0), _answer(2, 3), _answer(3, 1), _answer(1, 0), _answer(3, 1)]

    _, total = grading.grade_answers(questions, answers)

    assert total == sum(q.marks for q in questions.values())


def test_percentage():
    assert grading.percentage(3, 4) == 75
    assert grading.percentage(0, 0) == 0
    assert grading.percentage(2, 3) == 67
