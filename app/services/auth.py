"""Authentication service."""

import logging
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.errors import AuthFailure, AuthorizationFailure, BadRequest, NotFound, ValidationFailure
from app.models.token import Token
from app.models.user import ROLE_ADMIN, ROLE_USER, STATUS_ACTIVE, User
from app.schemas.auth import ProfileUpdate, SignupRequest
from app.services.jwt import get_jwt_service

logger = logging.getLogger("auth_service")

INVALID_CREDENTIALS = "Auth Failed (Invalid Credentials)"

# Fields merged by update_profile; a falsy submitted value keeps the stored one.
PROFILE_FIELDS = (
    "name",
    "first_name",
    "last_name",
    "date_of_birth",
    "gender",
    "family_name",
    "mobile_number",
    "bio",
    "accept_terms",
    "company_name",
    "nationality",
    "address",
    "favorite_animal",
    "job_title",
)
ADMIN_ONLY_FIELDS = ("status", "role")


@dataclass
class Actor:
    """The authenticated user performing a request."""

    user_id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass
class IssueResult:
    """A user together with its freshly overwritten token record."""

    user: User
    token: Token
    link: str | None = None


def duplicate_email_message(email: str) -> str:
    return f"E-Mail address {email} is already exists, please pick a different one."


class AuthService:
    """Handles signup, login, verification, password reset and profile changes."""

    def __init__(self) -> None:
        self.settings = get_settings()

    # --- lookups ---

    def find_user_by_email(self, db: Session, email: str) -> User | None:
        """Case-insensitive exact match on email."""
        return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    def get_user(self, db: Session, user_id: int) -> User | None:
        return db.get(User, user_id)

    def verify_link(self, user: User, token: Token) -> str:
        return f"{self.settings.CLIENT_URL}/verify-email.html?id={user.id}&token={token.refresh_token}"

    def reset_link(self, user: User, token: Token) -> str:
        return f"{self.settings.CLIENT_URL}/reset-password.html?id={user.id}&token={token.refresh_token}"

    def login_link(self) -> str:
        return f"{self.settings.CLIENT_URL}/login.html"

    # --- token records ---

    def issue_tokens(self, db: Session, user_id: int, refresh_expire_minutes: int | None = None) -> Token:
        """Find or create the user's token record and overwrite it with a new pair."""
        token = db.query(Token).filter(Token.user_id == user_id).first()
        if token is None:
            token = Token(user_id=user_id)
            db.add(token)
            try:
                db.flush()
            except IntegrityError:
                # A concurrent request created the record first; overwrite that one.
                db.rollback()
                token = db.query(Token).filter(Token.user_id == user_id).one()

        pair = get_jwt_service().create_token_pair(user_id, refresh_expire_minutes=refresh_expire_minutes)
        token.access_token = pair.access_token
        token.refresh_token = pair.refresh_token
        db.commit()
        db.refresh(token)
        return token

    # --- flows ---

    def signup(self, db: Session, body: SignupRequest) -> IssueResult:
        """Create an unverified user and issue its first token pair."""
        email = body.email.strip().lower()
        if self.find_user_by_email(db, email):
            raise ValidationFailure(duplicate_email_message(body.email))

        is_admin = email in self.settings.ADMIN_EMAILS
        user = User(
            email=email,
            name=body.name.strip() if body.name else None,
            role=ROLE_ADMIN if is_admin else ROLE_USER,
            accept_terms=body.accept_terms or is_admin,
        )
        user.set_password(body.password)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ValidationFailure(duplicate_email_message(body.email)) from None
        db.refresh(user)

        token = self.issue_tokens(db, user.id)
        logger.info("User %s signed up (role=%s)", user.id, user.role)
        return IssueResult(user=user, token=token, link=self.verify_link(user, token))

    def login(self, db: Session, email: str, password: str) -> IssueResult:
        """Check credentials and reissue the token pair.

        For an unverified or inactive user the result carries a fresh
        verification link; the caller decides how to respond.
        """
        user = self.find_user_by_email(db, email)
        if not user:
            raise NotFound(INVALID_CREDENTIALS)

        if not user.check_password(password):
            raise AuthFailure(INVALID_CREDENTIALS)

        token = self.issue_tokens(db, user.id)

        link = None
        if not user.is_verified or user.status != STATUS_ACTIVE:
            link = self.verify_link(user, token)
        else:
            logger.info("User %s logged in", user.id)
        return IssueResult(user=user, token=token, link=link)

    def verify_email(self, db: Session, user_id: int, token_value: str) -> bool:
        """Consume a verification token. Returns False if the user was already verified."""
        user = self.get_user(db, user_id)
        if not user:
            raise BadRequest(
                "Email verification token is invalid or has expired. Please click on resend for verify your Email."
            )

        if user.is_verified and user.status == STATUS_ACTIVE:
            return False

        token = db.query(Token).filter(Token.user_id == user.id, Token.refresh_token == token_value).first()
        if not token:
            raise BadRequest("Email verification token is invalid or has expired.")

        user.is_verified = True
        user.status = STATUS_ACTIVE
        user.accept_terms = True
        db.delete(token)
        db.commit()
        logger.info("User %s verified their email", user.id)
        return True

    def logout(self, db: Session, refresh_token: str) -> None:
        """Delete the token record holding this refresh token."""
        token = db.query(Token).filter(Token.refresh_token == refresh_token).first()
        if not token:
            raise BadRequest("Bad Request")

        if get_jwt_service().verify_refresh_token(refresh_token) is None:
            raise BadRequest("Bad Request")

        db.query(Token).filter(Token.refresh_token == refresh_token).delete(synchronize_session=False)
        db.commit()

    def refresh(self, db: Session, refresh_token: str) -> Token:
        """Exchange a stored, valid refresh token for a new pair."""
        token = db.query(Token).filter(Token.refresh_token == refresh_token).first()
        if not token:
            raise BadRequest("Bad Request")

        user_id = get_jwt_service().verify_refresh_token(refresh_token)
        if user_id is None:
            raise BadRequest("Bad Request")

        return self.issue_tokens(db, user_id)

    def forgot_password(self, db: Session, email: str) -> IssueResult:
        """Issue a reset link whose refresh token uses the reset-link expiry."""
        user = self.find_user_by_email(db, email)
        if not user:
            raise AuthFailure(
                f"The email address {email} is not associated with any account. "
                "Double-check your email address and try again."
            )

        token = self.issue_tokens(
            db, user.id, refresh_expire_minutes=self.settings.RESET_PASSWORD_LINK_EXPIRE_MINUTES
        )
        logger.info("Password reset requested for user %s", user.id)
        return IssueResult(user=user, token=token, link=self.reset_link(user, token))

    def reset_password(self, db: Session, user_id: int, token_value: str, new_password: str) -> User:
        """Consume a reset token and store the new password."""
        user = self.get_user(db, user_id)
        if not user:
            raise AuthFailure("Password reset token is invalid or has expired.")

        token = db.query(Token).filter(Token.user_id == user_id, Token.refresh_token == token_value).first()
        if not token:
            raise AuthFailure("Password reset token is invalid or has expired.")

        if get_jwt_service().verify_refresh_token(token_value) is None:
            raise BadRequest("Bad Request")

        user.set_password(new_password)
        db.delete(token)
        db.commit()
        logger.info("Password reset completed for user %s", user.id)
        return user

    def get_profile(self, db: Session, user_id: int) -> User:
        user = self.get_user(db, user_id)
        if not user:
            raise AuthFailure("Auth Failed")
        return user

    def authorized_target(self, db: Session, actor: Actor, user_id: int) -> User:
        user = self.get_user(db, user_id)
        if not user:
            raise BadRequest("Bad Request")

        if actor.user_id != user.id and not actor.is_admin:
            raise AuthorizationFailure("Auth Failed (Unauthorized)")
        return user

    def update_profile(
        self,
        db: Session,
        actor: Actor,
        user_id: int,
        changes: ProfileUpdate,
        profile_image: str | None = None,
    ) -> User:
        """Overwrite each field whose submitted value is truthy.

        ``role`` and ``status`` are merged only when the actor is an admin; a
        regular user submitting them for their own account leaves both
        unchanged rather than promoting or re-activating themselves.
        """
        user = self.authorized_target(db, actor, user_id)

        if changes.email:
            existing = self.find_user_by_email(db, changes.email)
            if existing and existing.id != user.id:
                raise ValidationFailure(duplicate_email_message(changes.email))
            user.email = changes.email.strip().lower()

        for field in PROFILE_FIELDS:
            value = getattr(changes, field)
            if value:
                setattr(user, field, value)

        if actor.is_admin:
            for field in ADMIN_ONLY_FIELDS:
                value = getattr(changes, field)
                if value:
                    setattr(user, field, value)

        if profile_image:
            user.profile_image = profile_image

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ValidationFailure(duplicate_email_message(changes.email or user.email)) from None
        db.refresh(user)
        return user

    def remove(self, db: Session, actor: Actor, user_id: int) -> None:
        """Hard-delete a user and its token record."""
        user = self.authorized_target(db, actor, user_id)
        db.query(Token).filter(Token.user_id == user.id).delete(synchronize_session=False)
        db.delete(user)
        db.commit()
        logger.info("User %s removed by user %s", user_id, actor.user_id)


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
