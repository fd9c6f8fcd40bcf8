from datetime import datetime, timedelta, timezone

import pytest

from client import ApiError, ApiSession, ExamAttempt, ExamCountdown
from client import api
from client.countdown import format_remaining
from conftest import exam_payload, make_question


@pytest.fixture
def session(app_client):
    return ApiSession("http://testserver", http=app_client)


@pytest.fixture
def admin_session(app_client, admin):
    s = ApiSession("http://testserver", http=app_client)
    api.login(s, "admin@example.com", "admin-pass")
    return s


@pytest.fixture
def live_exam(admin_session):
    data = exam_payload()
    data["scheduled_at"] = data["scheduled_at"].isoformat()
    exam = api.create_exam(admin_session, data)
    api.create_quiz(admin_session, exam["id"], {
        "title": "Layers",
        "description": "OSI and TCP/IP",
        "questions": [make_question("Lowest layer", 0, marks=2), make_question("Transport protocol", 1)],
    })
    return exam


# ─── Countdown ─────────────────────────────────────────────────────────────────

def test_format_remaining():
    assert format_remaining(59) == "00:59"
    assert format_remaining(600) == "10:00"
    assert format_remaining(3661) == "01:01:01"
    assert format_remaining(-3) == "00:00"


def test_countdown_levels():
    start = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
    countdown = ExamCountdown(start + timedelta(minutes=100), 100)

    assert countdown.level(start) == "normal"
    assert countdown.level(start + timedelta(minutes=75)) == "normal"
    assert countdown.level(start + timedelta(minutes=76)) == "warning"
    assert countdown.level(start + timedelta(minutes=89)) == "warning"
    assert countdown.level(start + timedelta(minutes=90)) == "danger"
    assert countdown.display(start + timedelta(minutes=90)) == "10:00"


def test_countdown_fires_once():
    fired = []
    deadline = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)
    countdown = ExamCountdown(deadline, 60, on_expired=lambda: fired.append(1))

    assert countdown.tick(deadline - timedelta(seconds=1)) == 1
    assert fired == []
    assert countdown.tick(deadline) == 0
    assert countdown.tick(deadline + timedelta(seconds=5)) == 0
    assert fired == [1]


# ─── Session ───────────────────────────────────────────────────────────────────

def test_login_keeps_token_on_session(session, student):
    assert not session.authenticated

    data = api.login(session, "asha@example.com", "student-pass")

    assert session.token == data["token"]
    assert api.me(session)["email"] == "asha@example.com"


def test_error_envelope_becomes_api_error(session, student):
    with pytest.raises(ApiError) as exc:
        api.register(session, "Dup", "asha@example.com", "secret1")

    assert exc.value.status_code == 409
    assert exc.value.message == "User already exists"


def test_unauthorized_response_clears_token(session):
    session.token = "stale.token.value"

    with pytest.raises(ApiError) as exc:
        api.me(session)

    assert exc.value.status_code == 401
    assert session.token is None


# ─── Attempt ───────────────────────────────────────────────────────────────────

def test_attempt_submits_recorded_answers(session, student, live_exam):
    api.login(session, "asha@example.com", "student-pass")

    attempt = ExamAttempt.start(session, live_exam["id"])
    q1, q2 = [q["id"] for q in attempt.questions()]
    attempt.answer(q1, 3)
    attempt.answer(q1, 0)
    attempt.answer(q2, 1)
    result = attempt.submit()

    assert result["total_score"] == 3
    assert attempt.submitted
    assert attempt.submit() is result
    with pytest.raises(RuntimeError):
        attempt.answer(q2, 0)


def test_countdown_expiry_submits_once(session, student, live_exam):
    api.login(session, "asha@example.com", "student-pass")
    attempt = ExamAttempt.start(session, live_exam["id"])
    attempt.answer(attempt.questions()[0]["id"], 0)

    deadline = attempt.countdown.deadline
    attempt.countdown.tick(deadline)
    attempt.countdown.tick(deadline + timedelta(seconds=1))

    assert attempt.result["total_score"] == 2
    results = api.my_results(session)
    assert len(results) == 1 and results[0]["completed"] is True


def test_resumed_attempt_shares_deadline(session, student, live_exam):
    api.login(session, "asha@example.com", "student-pass")

    first = ExamAttempt.start(session, live_exam["id"])
    second = ExamAttempt.start(session, live_exam["id"])

    assert second.resumed is True
    assert second.countdown.deadline == first.countdown.deadline


def test_details_added_after_submit(session, student, live_exam):
    api.login(session, "asha@example.com", "student-pass")
    attempt = ExamAttempt.start(session, live_exam["id"])
    result = attempt.submit()

    updated = api.add_result_details(session, result["id"], {"roll_number": "CS-042"})
    assert updated["additional_details"] == {"roll_number": "CS-042"}
    assert api.get_result(session, result["id"])["additional_details"] == {"roll_number": "CS-042"}


def test_details_route_rejects_admin(admin_session, session, student, live_exam):
    api.login(session, "asha@example.com", "student-pass")
    result = ExamAttempt.start(session, live_exam["id"]).submit()

    with pytest.raises(ApiError) as exc:
        api.add_result_details(admin_session, result["id"], {"seat": "X"})
    assert exc.value.status_code == 403
