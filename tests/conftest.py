import os
import sys
import tempfile
from datetime import timedelta
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# must be set before the app modules read them at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("CERTIFICATE_DIR", tempfile.mkdtemp(prefix="exam-portal-pdfs-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import main
from database import schemas
from database.database import Base, build_engine, get_db
from database.models import Role
from services import certificate, clock, content, identity


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def certificate_dir(tmp_path, monkeypatch):
    out = tmp_path / "pdfs"
    monkeypatch.setattr(certificate, "CERTIFICATE_DIR", str(out))
    return out


@pytest.fixture
def app_client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    main.app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(main.app)
    finally:
        main.app.dependency_overrides.clear()


# ─── Accounts ──────────────────────────────────────────────────────────────────

@pytest.fixture
def admin(db):
    user, _ = identity.register(db, "Exam Office", "admin@example.com", "admin-pass", Role.ADMIN)
    return user


@pytest.fixture
def student(db):
    user, _ = identity.register(db, "Asha Rao", "asha@example.com", "student-pass", Role.STUDENT)
    return user


@pytest.fixture
def other_student(db):
    user, _ = identity.register(db, "Ben Ito", "ben@example.com", "student-pass", Role.STUDENT)
    return user


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {identity.issue_token(admin)}"}


@pytest.fixture
def student_headers(student):
    return {"Authorization": f"Bearer {identity.issue_token(student)}"}


# ─── Content ───────────────────────────────────────────────────────────────────

def make_question(text, correct_index, marks=1):
    return {
        "question": text,
        "marks": marks,
        "options": [{"text": f"{text} option {i}", "is_correct": i == correct_index} for i in range(4)],
    }


def exam_payload(**overrides):
    data = {
        "title": "Networks Midterm",
        "description": "Layers, routing and sockets",
        # start of today: listed for students and already open
        "scheduled_at": clock.start_of_day(clock.now()),
        "duration_minutes": 60,
        "max_students": 30,
    }
    data.update(overrides)
    return data


def build_exam(db, creator, **overrides):
    """Exam with two quizzes; question marks 2 + 1 + 3, correct options 0, 1, 2."""
    exam = content.create_exam(db, schemas.ExamCreate(**exam_payload(**overrides)), creator.id)
    content.create_quiz(db, exam.id, schemas.QuizCreate(
        title="Layers",
        description="OSI and TCP/IP",
        questions=[make_question("Lowest layer", 0, marks=2), make_question("Transport protocol", 1)],
    ), creator.id)
    content.create_quiz(db, exam.id, schemas.QuizCreate(
        title="Routing",
        description="Paths between networks",
        questions=[make_question("Distance vector", 2, marks=3)],
    ), creator.id)
    return content.get_exam(db, exam.id)


def question_ids(exam):
    return [q.id for quiz in exam.quizzes for q in quiz.questions]


@pytest.fixture
def exam(db, admin):
    return build_exam(db, admin)


@pytest.fixture
def past_start():
    """A moment safely inside today's exam window."""
    return clock.start_of_day(clock.now()) + timedelta(minutes=1)
