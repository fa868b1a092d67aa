import pytest

from app.core.errors import BadRequestError, ConflictError, NotFoundError
from app.core.security import create_password_reset_token, decode_token, verify_password
from app.models.user import UserRole
from app.schemas.user import UserRegister, UserUpdate
from app.services.email_service import email_service
from app.services.user_service import user_service
from app.utils.pagination import PaginationOptions
from conftest import DEFAULT_PASSWORD


@pytest.fixture
def sent_emails(monkeypatch):
    """Record outgoing emails instead of delivering them"""
    sent = []

    def record_reset(email, reset_token, name):
        sent.append(("reset", email, reset_token))
        return True

    def record_welcome(email, first_name):
        sent.append(("welcome", email, None))
        return True

    monkeypatch.setattr(email_service, "send_password_reset_email", record_reset)
    monkeypatch.setattr(email_service, "send_welcome_email", record_welcome)
    return sent


def registration(email="new@example.com", password=DEFAULT_PASSWORD):
    return UserRegister(email=email, password=password, first_name="New", last_name="Person")


def test_register_stores_hashed_password_and_sends_welcome(db, sent_emails):
    user = user_service.register(db, registration())

    assert user.role == UserRole.USER
    assert user.hashed_password != DEFAULT_PASSWORD
    assert verify_password(DEFAULT_PASSWORD, user.hashed_password)
    assert sent_emails == [("welcome", "new@example.com", None)]


def test_register_same_email_in_any_case_conflicts(db, sent_emails):
    user_service.register(db, registration("a@x.com"))

    with pytest.raises(ConflictError):
        user_service.register(db, registration("A@X.COM"))


def test_login_returns_token_for_user(db, regular_user):
    result = user_service.login(db, "REGULAR@example.com", DEFAULT_PASSWORD)

    assert result["user"].id == regular_user.id
    assert decode_token(result["token"])["sub"] == str(regular_user.id)


def test_login_with_wrong_password_is_bad_request(db, regular_user):
    with pytest.raises(BadRequestError) as exc_info:
        user_service.login(db, regular_user.email, "Wrong123")
    assert exc_info.value.message == "Invalid email or password"


def test_login_with_unknown_email_is_bad_request(db):
    with pytest.raises(BadRequestError):
        user_service.login(db, "nobody@example.com", DEFAULT_PASSWORD)


def test_login_of_deactivated_user_is_bad_request(db, make_user):
    user = make_user(email="gone@example.com", is_active=False)

    with pytest.raises(BadRequestError) as exc_info:
        user_service.login(db, user.email, DEFAULT_PASSWORD)
    assert exc_info.value.message == "User account is deactivated"


def test_change_password_requires_old_password(db, regular_user):
    with pytest.raises(BadRequestError):
        user_service.change_password(db, regular_user.id, "Wrong123", "Newpass123")

    user_service.change_password(db, regular_user.id, DEFAULT_PASSWORD, "Newpass123")
    assert user_service.login(db, regular_user.email, "Newpass123")["token"]


def test_reset_password_for_unknown_email_sends_nothing(db, sent_emails):
    assert user_service.reset_password(db, "nobody@example.com") is True
    assert sent_emails == []


def test_reset_password_for_known_email_sends_exactly_one_email(db, regular_user, sent_emails):
    assert user_service.reset_password(db, regular_user.email) is True

    assert len(sent_emails) == 1
    kind, email, token = sent_emails[0]
    assert (kind, email) == ("reset", regular_user.email)
    assert token


def test_confirm_password_reset(db, regular_user):
    token = create_password_reset_token(regular_user.id)

    user_service.confirm_password_reset(db, token, "Brandnew123")

    assert user_service.login(db, regular_user.email, "Brandnew123")


def test_confirm_password_reset_rejects_access_tokens(db, regular_user):
    token = user_service.login(db, regular_user.email, DEFAULT_PASSWORD)["token"]

    with pytest.raises(BadRequestError):
        user_service.confirm_password_reset(db, token, "Brandnew123")


def test_update_email_to_taken_address_conflicts(db, make_user):
    first = make_user(email="first@example.com")
    second = make_user(email="second@example.com")

    with pytest.raises(ConflictError):
        user_service.update(db, second.id, {"email": first.email})


def test_update_profile_ignores_role_and_active_flag(db, regular_user):
    user = user_service.update_profile(
        db, regular_user.id, UserUpdate(first_name="Renamed", role=UserRole.ADMIN, is_active=False)
    )

    assert user.first_name == "Renamed"
    assert user.role == UserRole.USER
    assert user.is_active is True


def test_update_profile_with_only_protected_fields_is_rejected(db, regular_user):
    with pytest.raises(BadRequestError):
        user_service.update_profile(db, regular_user.id, UserUpdate(role=UserRole.ADMIN))


def test_activation_toggle_is_idempotent(db, regular_user):
    user_service.deactivate_user(db, regular_user.id)
    assert user_service.deactivate_user(db, regular_user.id).is_active is False
    user_service.activate_user(db, regular_user.id)
    assert user_service.activate_user(db, regular_user.id).is_active is True


def test_missing_user_is_not_found(db):
    with pytest.raises(NotFoundError):
        user_service.get_by_id(db, 404)
    with pytest.raises(NotFoundError):
        user_service.deactivate_user(db, 404)


def test_search_takes_precedence_over_role(db, make_user):
    make_user(email="alice@example.com", role=UserRole.ADMIN)
    make_user(email="bob@example.com", role=UserRole.USER)

    page = user_service.list_users(db, PaginationOptions(), search="bob", role=UserRole.ADMIN)
    assert [u.email for u in page.items] == ["bob@example.com"]

    page = user_service.list_users(db, PaginationOptions(), role=UserRole.ADMIN)
    assert [u.email for u in page.items] == ["alice@example.com"]
