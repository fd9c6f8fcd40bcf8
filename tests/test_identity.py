import pytest

from auth.security import create_access_token, decode_token
from database.models import Role
from services import identity
from services.errors import DuplicateEmail, Forbidden, InvalidCredentials, NotFound, Unauthorized


def test_register_normalizes_email_and_issues_token(db):
    user, token = identity.register(db, "  Asha Rao ", "  Asha@Example.COM ", "secret1")

    assert user.email == "asha@example.com"
    assert user.name == "Asha Rao"
    assert user.role is Role.STUDENT
    payload = decode_token(token)
    assert payload["id"] == user.id
    assert payload["role"] == "student"


def test_register_rejects_existing_email_in_any_case(db, student):
    with pytest.raises(DuplicateEmail) as exc:
        identity.register(db, "Someone", "ASHA@example.com", "secret1")
    assert exc.value.status_code == 409


def test_login_returns_user_and_token(db, student):
    user, token = identity.login(db, "Asha@Example.com", "student-pass")

    assert user.id == student.id
    assert identity.authenticate(token).user_id == student.id


@pytest.mark.parametrize("email,password", [
    ("asha@example.com", "wrong-pass"),
    ("nobody@example.com", "student-pass"),
])
def test_login_failures_are_indistinguishable(db, student, email, password):
    with pytest.raises(InvalidCredentials) as exc:
        identity.login(db, email, password)
    assert exc.value.message == "Invalid credentials"
    assert exc.value.status_code == 401


def test_authenticate_without_token():
    with pytest.raises(Unauthorized, match="No token, authorization denied"):
        identity.authenticate(None)


def test_authenticate_rejects_garbage():
    with pytest.raises(Unauthorized, match="Token is not valid"):
        identity.authenticate("garbage")


def test_authenticate_rejects_unknown_role():
    token = create_access_token(1, "superuser")
    with pytest.raises(Unauthorized, match="Token is not valid"):
        identity.authenticate(token)


def test_authenticate_does_not_need_the_database(admin):
    current = identity.authenticate(identity.issue_token(admin))

    assert current.user_id == admin.id
    assert current.is_admin


def test_authorize_requires_the_exact_role(admin, student):
    admin_identity = identity.authenticate(identity.issue_token(admin))
    student_identity = identity.authenticate(identity.issue_token(student))

    assert identity.authorize(admin_identity, Role.ADMIN) is admin_identity
    with pytest.raises(Forbidden):
        identity.authorize(student_identity, Role.ADMIN)
    with pytest.raises(Forbidden):
        identity.authorize(admin_identity, Role.STUDENT)


def test_current_user_for_deleted_account(db):
    ghost = identity.Identity(user_id=9999, role=Role.STUDENT)
    with pytest.raises(NotFound):
        identity.current_user(db, ghost)
