"""
Tests for account flows through the GraphQL API.

This test suite covers:
- Registration (validation, duplicates, immediate sign-in)
- Login with credential checks and throttling
- Email verification and resend
- Password reset with expiring tokens
- Profile updates and the ``me`` query
"""

from datetime import timedelta

from sqlalchemy.orm import Session

from domain.models import User, utc_now
from test_fixtures import (
    STRONG_PASSWORD,
    auth_headers,
    db_session,
    error_codes,
    error_messages,
    graphql,
    make_user,
    unique_email,
)

REGISTER = """
mutation Register($input: UserRegistrationInput!) {
  register(input: $input) {
    token
    user { id email name emailVerified goal activityLevel preferences }
  }
}
"""

LOGIN = """
mutation Login($email: String!, $password: String!) {
  login(email: $email, password: $password) { token user { id email } }
}
"""

ME = "query { me { id email name goal preferences dietPlans { id } } }"


def _stored_user(db: Session, email: str) -> User:
    db.expire_all()
    return db.query(User).filter(User.email == email).one()


# =============================================================================
# REGISTRATION
# =============================================================================


def test_register_creates_unverified_user_and_signs_in(db_session: Session):
    email = unique_email("new.user")
    body = graphql(
        REGISTER,
        {
            "input": {
                "email": email.upper(),
                "password": STRONG_PASSWORD,
                "name": "  New User ",
                "goal": "WEIGHT_LOSS",
                "activityLevel": "SEDENTARY",
                "preferences": ["vegan", "<b>spicy</b>"],
            }
        },
    )

    assert "errors" not in body
    payload = body["data"]["register"]
    assert payload["token"]
    assert payload["user"]["email"] == email
    assert payload["user"]["name"] == "New User"
    assert payload["user"]["emailVerified"] is False
    assert payload["user"]["goal"] == "WEIGHT_LOSS"
    assert payload["user"]["preferences"] == ["vegan", "bspicy/b"]

    stored = _stored_user(db_session, email)
    assert stored.verification_token
    assert stored.password != STRONG_PASSWORD


def test_register_duplicate_email_conflicts(db_session: Session):
    user = make_user(db_session)
    body = graphql(
        REGISTER,
        {"input": {"email": user.email, "password": STRONG_PASSWORD, "name": "Someone Else"}},
    )
    assert body["data"] is None
    assert error_codes(body) == ["CONFLICT"]
    assert error_messages(body) == ["User with this email already exists"]


def test_register_rejects_weak_password_and_bad_email(db_session: Session):
    weak = graphql(REGISTER, {"input": {"email": unique_email(), "password": "short", "name": "Weak"}})
    assert error_codes(weak) == ["BAD_USER_INPUT"]
    assert error_messages(weak)[0].startswith("Password requirements not met")

    bad_email = graphql(REGISTER, {"input": {"email": "not-an-email", "password": STRONG_PASSWORD, "name": "Bad"}})
    assert error_messages(bad_email) == ["Invalid email format"]


def test_register_reports_common_password_pattern(db_session: Session):
    body = graphql(REGISTER, {"input": {"email": unique_email(), "password": "MyPassword123!", "name": "Common"}})
    assert error_codes(body) == ["BAD_USER_INPUT"]
    assert error_messages(body) == [
        "Password requirements not met: Password contains common patterns that are not secure"
    ]


# =============================================================================
# LOGIN
# =============================================================================


def test_login_success_and_me(db_session: Session):
    user = make_user(db_session)
    body = graphql(LOGIN, {"email": user.email, "password": STRONG_PASSWORD})
    token = body["data"]["login"]["token"]
    assert body["data"]["login"]["user"]["id"] == str(user.id)

    me = graphql(ME, headers={"Authorization": f"Bearer {token}"})
    assert me["data"]["me"]["email"] == user.email
    assert me["data"]["me"]["goal"] == "WEIGHT_LOSS"
    assert me["data"]["me"]["preferences"] == ["mediterranean"]
    assert me["data"]["me"]["dietPlans"] == []


def test_login_wrong_password_is_generic(db_session: Session):
    user = make_user(db_session)
    wrong = graphql(LOGIN, {"email": user.email, "password": "Wrong-Pass-1!"})
    unknown = graphql(LOGIN, {"email": unique_email(), "password": STRONG_PASSWORD})

    assert error_messages(wrong) == ["Invalid email or password"]
    assert error_messages(unknown) == ["Invalid email or password"]
    assert error_codes(wrong) == ["UNAUTHENTICATED"]


def test_login_is_throttled_after_five_attempts(db_session: Session):
    user = make_user(db_session)
    for _ in range(5):
        graphql(LOGIN, {"email": user.email, "password": "Wrong-Pass-1!"})

    # Even the right password is refused inside the window
    body = graphql(LOGIN, {"email": user.email, "password": STRONG_PASSWORD})
    assert error_codes(body) == ["RATE_LIMITED"]
    assert error_messages(body) == ["Too many login attempts. Please try again later."]


def test_me_requires_authentication(db_session: Session):
    anonymous = graphql(ME)
    assert error_messages(anonymous) == ["Not authenticated"]

    bad_token = graphql(ME, headers={"Authorization": "Bearer not-a-jwt"})
    assert error_codes(bad_token) == ["UNAUTHENTICATED"]


# =============================================================================
# EMAIL VERIFICATION
# =============================================================================


def test_verify_email_consumes_token(db_session: Session):
    user = make_user(db_session, verification_token="verify-me")
    query = "mutation($token: String!) { verifyEmail(token: $token) { token user { emailVerified } } }"

    body = graphql(query, {"token": "verify-me"})
    assert body["data"]["verifyEmail"]["user"]["emailVerified"] is True

    stored = _stored_user(db_session, user.email)
    assert stored.verification_token is None

    again = graphql(query, {"token": "verify-me"})
    assert error_messages(again) == ["Invalid or expired verification token"]


def test_resend_verification(db_session: Session):
    pending = make_user(db_session, verification_token="old-token")
    verified = make_user(db_session, profile_type="athlete", email_verified=True)
    query = "mutation($email: String!) { resendVerification(email: $email) }"

    assert graphql(query, {"email": pending.email})["data"]["resendVerification"] is True
    assert _stored_user(db_session, pending.email).verification_token != "old-token"

    # Unknown addresses get the same answer
    assert graphql(query, {"email": unique_email()})["data"]["resendVerification"] is True

    body = graphql(query, {"email": verified.email})
    assert error_messages(body) == ["Email is already verified"]


# =============================================================================
# PASSWORD RESET
# =============================================================================

FORGOT = "mutation($email: String!) { forgotPassword(email: $email) }"
RESET = "mutation($token: String!, $password: String!) { resetPassword(token: $token, newPassword: $password) }"


def test_password_reset_flow(db_session: Session):
    user = make_user(db_session)
    requested_at = utc_now()
    assert graphql(FORGOT, {"email": user.email})["data"]["forgotPassword"] is True

    stored = _stored_user(db_session, user.email)
    assert stored.reset_token
    # Naive UTC, one hour ahead
    assert stored.reset_token_expiry.tzinfo is None
    assert requested_at + timedelta(minutes=59) < stored.reset_token_expiry <= utc_now() + timedelta(hours=1)

    new_password = "Brand-New-77?"
    body = graphql(RESET, {"token": stored.reset_token, "password": new_password})
    assert body["data"]["resetPassword"] is True

    stored = _stored_user(db_session, user.email)
    assert stored.reset_token is None
    assert "errors" not in graphql(LOGIN, {"email": user.email, "password": new_password})


def test_expired_reset_token_is_rejected(db_session: Session):
    make_user(
        db_session,
        reset_token="stale",
        reset_token_expiry=utc_now() - timedelta(minutes=1),
    )
    body = graphql(RESET, {"token": "stale", "password": "Brand-New-77?"})
    assert error_messages(body) == ["Reset token has expired"]

    unknown = graphql(RESET, {"token": "nope", "password": "Brand-New-77?"})
    assert error_messages(unknown) == ["Invalid or expired reset token"]


def test_forgot_password_unknown_email_succeeds(db_session: Session):
    assert graphql(FORGOT, {"email": unique_email()})["data"]["forgotPassword"] is True


# =============================================================================
# PROFILE
# =============================================================================

UPDATE_PROFILE = """
mutation($input: UserUpdateInput!) {
  updateProfile(input: $input) { name age goal activityLevel preferences }
}
"""


def test_update_profile_writes_given_fields(db_session: Session):
    user = make_user(db_session)
    body = graphql(
        UPDATE_PROFILE,
        {"input": {"name": "Sarah M.", "age": 35, "goal": "MAINTENANCE", "preferences": ["keto"]}},
        headers=auth_headers(user),
    )

    updated = body["data"]["updateProfile"]
    assert updated["name"] == "Sarah M."
    assert updated["age"] == 35
    assert updated["goal"] == "MAINTENANCE"
    assert updated["activityLevel"] == "LIGHTLY_ACTIVE"
    assert updated["preferences"] == ["keto"]


def test_update_profile_without_preferences_clears_them(db_session: Session):
    user = make_user(db_session)
    body = graphql(UPDATE_PROFILE, {"input": {"age": 40}}, headers=auth_headers(user))

    assert body["data"]["updateProfile"]["age"] == 40
    assert body["data"]["updateProfile"]["name"] == "Sarah Martinez"
    assert body["data"]["updateProfile"]["preferences"] == []


def test_update_profile_requires_authentication(db_session: Session):
    body = graphql(UPDATE_PROFILE, {"input": {"age": 40}})
    assert error_codes(body) == ["UNAUTHENTICATED"]
