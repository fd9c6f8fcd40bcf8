from datetime import timedelta
from types import SimpleNamespace

import pytest

from conftest import question_ids
from database.models import Notification, NotificationType
from services import certificate, exam_session, identity, results
from services.errors import Forbidden, NotFound, ValidationError


def _identity(user):
    return identity.authenticate(identity.issue_token(user))


def _take(db, student, exam, now, correct=True, details=None):
    exam_session.start_attempt(db, student.id, exam.id, now=now)
    q1, q2, q3 = question_ids(exam)
    picks = [(q1, 0), (q2, 1), (q3, 2)] if correct else [(q1, 3)]
    answers = [SimpleNamespace(question_id=qid, selected_option_index=idx) for qid, idx in picks]
    return exam_session.submit_attempt(
        db, student.id, exam.id, answers, additional_details=details, now=now + timedelta(minutes=10),
    )


def test_exam_results_highest_score_first(db, student, other_student, exam, past_start):
    low = _take(db, student, exam, past_start, correct=False)
    high = _take(db, other_student, exam, past_start)

    assert [r.id for r in results.list_exam_results(db, exam.id)] == [high.id, low.id]


def test_exam_results_for_missing_exam(db):
    with pytest.raises(NotFound):
        results.list_exam_results(db, 12345)


def test_student_results_are_their_own(db, student, other_student, exam, past_start):
    mine = _take(db, student, exam, past_start)
    _take(db, other_student, exam, past_start)

    assert [r.id for r in results.list_student_results(db, student.id)] == [mine.id]


def test_result_visible_to_owner_and_admin_only(db, admin, student, other_student, exam, past_start):
    result = _take(db, student, exam, past_start)

    assert results.get_result(db, result.id, _identity(student)).id == result.id
    assert results.get_result(db, result.id, _identity(admin)).id == result.id
    with pytest.raises(Forbidden, match="User not authorized"):
        results.get_result(db, result.id, _identity(other_student))


def test_missing_result(db, admin):
    with pytest.raises(NotFound, match="Result not found"):
        results.get_result(db, 404, _identity(admin))


def test_feedback_overwrites_and_notifies(db, student, exam, past_start):
    result = _take(db, student, exam, past_start)

    results.add_feedback(db, result.id, "Good start")
    updated = results.add_feedback(db, result.id, "Strong on routing")

    assert updated.feedback == "Strong on routing"
    notes = db.query(Notification).filter(Notification.type == NotificationType.FEEDBACK_ADDED).all()
    assert len(notes) == 2
    assert all(n.user_id == student.id and n.related_to == result.id for n in notes)


def test_certificate_requires_submitted_attempt(db, student, exam, past_start):
    attempt = exam_session.start_attempt(db, student.id, exam.id, now=past_start)

    with pytest.raises(ValidationError):
        results.render_certificate(db, attempt.result.id, _identity(student))


def test_certificate_written_and_recorded(db, student, exam, past_start, certificate_dir):
    result = _take(db, student, exam, past_start, details={"roll_number": "CS-042"})

    rendered = results.render_certificate(db, result.id, _identity(student))

    path = certificate_dir / f"exam_result_{result.id}.pdf"
    assert path.read_bytes().startswith(b"%PDF")
    assert rendered.pdf_generated is True
    assert rendered.pdf_url == f"/pdfs/exam_result_{result.id}.pdf"


def test_certificate_rendering_is_repeatable(db, student, exam, past_start):
    result = _take(db, student, exam, past_start)
    results.add_feedback(db, result.id, "Well done <really>")
    loaded = results.get_result(db, result.id, _identity(student))

    first = certificate.generate_certificate(loaded).getvalue()
    second = certificate.generate_certificate(loaded).getvalue()

    assert first == second


def test_certificate_denied_to_other_student(db, student, other_student, exam, past_start):
    result = _take(db, student, exam, past_start)
    with pytest.raises(Forbidden):
        results.render_certificate(db, result.id, _identity(other_student))


def test_owner_replaces_details_after_submit(db, student, exam, past_start):
    result = _take(db, student, exam, past_start, details={"seat": "B12"})

    updated = results.set_additional_details(db, result.id, _identity(student), {"roll_number": "CS-042"})

    assert updated.additional_details == {"roll_number": "CS-042"}
    assert updated.total_score == 6


def test_details_are_owner_only(db, admin, student, other_student, exam, past_start):
    result = _take(db, student, exam, past_start)

    with pytest.raises(Forbidden):
        results.set_additional_details(db, result.id, _identity(other_student), {"seat": "X"})
    with pytest.raises(Forbidden):
        results.set_additional_details(db, result.id, _identity(admin), {"seat": "X"})


def test_details_need_submitted_attempt(db, student, exam, past_start):
    attempt = exam_session.start_attempt(db, student.id, exam.id, now=past_start)

    with pytest.raises(ValidationError):
        results.set_additional_details(db, attempt.result.id, _identity(student), {"seat": "X"})


def test_details_for_missing_result(db, student):
    with pytest.raises(NotFound):
        results.set_additional_details(db, 404, _identity(student), {"seat": "X"})


def test_certificate_shows_replaced_details(db, student, exam, past_start, certificate_dir, monkeypatch):
    result = _take(db, student, exam, past_start, details={"seat": "B12"})
    results.render_certificate(db, result.id, _identity(student))

    lines = []
    real_paragraph = certificate.Paragraph

    def recording_paragraph(text, style):
        lines.append(text)
        return real_paragraph(text, style)

    monkeypatch.setattr(certificate, "Paragraph", recording_paragraph)
    results.set_additional_details(db, result.id, _identity(student), {"roll_number": "CS-042"})

    assert "<b>roll_number:</b> CS-042" in lines
    assert not any("B12" in line for line in lines)
    assert (certificate_dir / f"exam_result_{result.id}.pdf").read_bytes().startswith(b"%PDF")
