"""Authentication API endpoints."""

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Response, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.background import BackgroundTask

from app.database import get_db
from app.dependencies import clear_auth_cookies, get_current_user, set_auth_cookies
from app.errors import BadRequest
from app.schemas.auth import (
    ApiResponse,
    ForgotPasswordRequest,
    LoginLinkData,
    LoginRequest,
    LoginUser,
    ProfileUpdate,
    RefreshTokenRequest,
    ResetLinkData,
    ResetPasswordRequest,
    SignupData,
    SignupRequest,
    TokenData,
    UserEnvelope,
    UserProfile,
    UserSummary,
    error_body,
)
from app.services.auth import Actor, get_auth_service
from app.services.mailer import EmailService, get_email_service
from app.services.uploads import get_upload_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def profile_update_form(
    name: str | None = Form(None),
    first_name: str | None = Form(None, alias="firstName"),
    last_name: str | None = Form(None, alias="lastName"),
    email: str | None = Form(None),
    date_of_birth: str | None = Form(None, alias="dateOfBirth"),
    gender: str | None = Form(None),
    family_name: str | None = Form(None, alias="familyName"),
    mobile_number: str | None = Form(None, alias="mobileNumber"),
    status: str | None = Form(None),
    role: str | None = Form(None),
    bio: str | None = Form(None),
    accept_terms: bool | None = Form(None, alias="acceptTerms"),
    company_name: str | None = Form(None, alias="companyName"),
    nationality: str | None = Form(None),
    address: str | None = Form(None),
    favorite_animal: str | None = Form(None, alias="favoriteAnimal"),
    job_title: str | None = Form(None, alias="jobTitle"),
) -> ProfileUpdate:
    """Collect the multipart/form profile fields."""
    try:
        return ProfileUpdate(
            name=name,
            first_name=first_name,
            last_name=last_name,
            email=email,
            date_of_birth=date_of_birth,
            gender=gender,
            family_name=family_name,
            mobile_number=mobile_number,
            status=status,
            role=role,
            bio=bio,
            accept_terms=accept_terms,
            company_name=company_name,
            nationality=nationality,
            address=address,
            favorite_animal=favorite_animal,
            job_title=job_title,
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from None


@router.post("/signup", response_model=ApiResponse[UserEnvelope[SignupData]], status_code=201)
def signup(
    body: SignupRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> ApiResponse[UserEnvelope[SignupData]]:
    """Register a new account and email a verification link."""
    result = get_auth_service().signup(db, body)
    background_tasks.add_task(email_service.send_email_verification, result.user.email, result.user.name, result.link)

    return ApiResponse(
        data=UserEnvelope(
            user=SignupData(
                access_token=result.token.access_token,
                refresh_token=result.token.refresh_token,
                verify_email_link=result.link,
            )
        ),
        message=(
            f"Auth Signup is success. An Email with Verification link has been sent to your account "
            f"{result.user.email}. Please verify your email first or use the verification link sent "
            f"with this response."
        ),
        status=201,
    )


@router.post("/login", response_model=ApiResponse[UserEnvelope[LoginUser]])
def login(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """Authenticate and receive access/refresh tokens as body and cookies."""
    result = get_auth_service().login(db, body.email, body.password)
    user, token = result.user, result.token

    if result.link:
        data = SignupData(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            verify_email_link=result.link,
        ).model_dump(by_alias=True)
        message = (
            f"Your Email has not been verified. An Email with Verification link has been sent to your account "
            f"{user.email}. Please verify your email first or use the verification link sent with this response."
        )
        return JSONResponse(
            status_code=401,
            content=error_body(message, 401, data=data),
            background=BackgroundTask(email_service.resend_email_verification, user.email, user.name, result.link),
        )

    set_auth_cookies(response, token.access_token, token.refresh_token)
    login_user = LoginUser(
        **UserSummary.model_validate(user).model_dump(),
        access_token=token.access_token,
        refresh_token=token.refresh_token,
    )
    return ApiResponse(data=UserEnvelope(user=login_user), message="Auth logged in successful.", status=200)


@router.get("/verify-email/{user_id}/{token}", response_model=ApiResponse[None])
def verify_email(user_id: int, token: str, db: Session = Depends(get_db)) -> ApiResponse[None]:
    """Mark the account verified using the emailed token."""
    verified_now = get_auth_service().verify_email(db, user_id, token)
    if not verified_now:
        return ApiResponse(message="User has already been verified. Please Login..", status=200)
    return ApiResponse(message="Your account has been successfully verified. Please Login.", status=200)


@router.post("/logout", response_model=ApiResponse[None])
def logout(body: RefreshTokenRequest, response: Response, db: Session = Depends(get_db)) -> ApiResponse[None]:
    """Discard the stored token record and clear cookies."""
    get_auth_service().logout(db, body.refresh_token)
    clear_auth_cookies(response)
    return ApiResponse(message="Successfully logged out", status=200)


@router.post("/refresh-token", response_model=ApiResponse[UserEnvelope[TokenData]])
def refresh_token(
    body: RefreshTokenRequest, response: Response, db: Session = Depends(get_db)
) -> ApiResponse[UserEnvelope[TokenData]]:
    """Exchange a refresh token for a new token pair."""
    token = get_auth_service().refresh(db, body.refresh_token)
    set_auth_cookies(response, token.access_token, token.refresh_token)
    return ApiResponse(
        data=UserEnvelope(user=TokenData(access_token=token.access_token, refresh_token=token.refresh_token)),
        message="Auth logged in successful.",
        status=200,
    )


@router.post("/forget-password", response_model=ApiResponse[UserEnvelope[ResetLinkData]])
def forgot_password(
    body: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> ApiResponse[UserEnvelope[ResetLinkData]]:
    """Email a password reset link."""
    result = get_auth_service().forgot_password(db, body.email)
    background_tasks.add_task(email_service.send_reset_password, result.user.email, result.user.name, result.link)

    return ApiResponse(
        data=UserEnvelope(user=ResetLinkData(reset_password_token=result.link)),
        message=(
            f"Auth success. An Email with Reset password link has been sent to your account {result.user.email}. "
            f"Please check it to reset your password or use the link sent with this response."
        ),
        status=200,
    )


@router.post("/reset-password/{user_id}/{token}", response_model=ApiResponse[UserEnvelope[LoginLinkData]])
def reset_password(
    user_id: int,
    token: str,
    body: ResetPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> ApiResponse[UserEnvelope[LoginLinkData]]:
    """Set a new password using the emailed reset token."""
    auth_service = get_auth_service()
    user = auth_service.reset_password(db, user_id, token, body.password)
    login_link = auth_service.login_link()
    background_tasks.add_task(email_service.send_reset_password_confirmation, user.email, user.name, login_link)

    return ApiResponse(
        data=UserEnvelope(user=LoginLinkData(login_link=login_link)),
        message="Your password has been reset successfully. Please login.",
        status=200,
    )


@router.get("/me", response_model=ApiResponse[UserEnvelope[UserProfile]])
def get_profile(
    actor: Actor = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[UserEnvelope[UserProfile]]:
    """Return the caller's own profile."""
    user = get_auth_service().get_profile(db, actor.user_id)
    return ApiResponse(
        data=UserEnvelope(user=UserProfile.model_validate(user)),
        message="Successfully found user profile",
        status=200,
    )


@router.patch("/update/{user_id}", response_model=ApiResponse[UserEnvelope[UserProfile]])
async def update_profile(
    user_id: int,
    changes: ProfileUpdate = Depends(profile_update_form),
    profile_image: UploadFile | None = File(None, alias="profileImage"),
    actor: Actor = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[UserEnvelope[UserProfile]]:
    """Update profile fields; empty values keep what is stored."""
    auth_service = get_auth_service()
    auth_service.authorized_target(db, actor, user_id)

    upload_service = get_upload_service()
    image_path = None
    if profile_image is not None and profile_image.filename:
        error = upload_service.validate_upload_metadata(profile_image.filename, profile_image.content_type)
        if error:
            raise BadRequest(error)
        try:
            image_path = await upload_service.store_profile_image(profile_image)
        except ValueError as e:
            raise BadRequest(str(e)) from None

    try:
        user = auth_service.update_profile(db, actor, user_id, changes, profile_image=image_path)
    except Exception:
        # Nothing references the stored image when the update fails.
        if image_path:
            upload_service.remove_profile_image(image_path)
        raise
    return ApiResponse(
        data=UserEnvelope(user=UserProfile.model_validate(user)),
        message=f"Successfully updated user by ID: {user_id}",
        status=200,
    )


@router.delete("/remove/{user_id}", response_model=ApiResponse[None])
def remove_user(
    user_id: int,
    actor: Actor = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[None]:
    """Permanently delete an account."""
    get_auth_service().remove(db, actor, user_id)
    return ApiResponse(message=f"Successfully deleted user by ID {user_id}", status=200)
