from typing import Optional

from fastapi import APIRouter, Cookie, Depends, status
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from src.api.error import ClientError
from src.app.use_cases.password_reset import (
    BoundaryResponse,
    ResetOutcome,
    ResetTokenManager,
    ResponseRouter,
    ViewResponse,
)
from src.core.result import Error, Result
from src.depends import (
    get_config,
    get_current_user_email,
    get_reset_token_manager,
    get_response_router,
)

router = APIRouter()


def to_http_response(response: BoundaryResponse) -> Response:
    """Serialize a boundary response; view instructions are returned as JSON"""
    if isinstance(response, ViewResponse):
        return JSONResponse(
            status_code=response.status_code,
            content={"view": response.view, "context": response.context},
        )
    if response.payload is None:
        return Response(status_code=response.status_code)
    return JSONResponse(status_code=response.status_code, content=response.payload)


async def dispatch(
    responder: ResponseRouter,
    result: Result[ResetOutcome],
    conceal_missing_account: bool = False,
) -> Response:
    response = await responder.dispatch(result, conceal_missing_account)
    return to_http_response(response)


class ForgotPasswordRequest(BaseModel):
    """
    Forgot password HTTP request payload

    Email syntax is checked by the reset manager so that invalid input is
    answered in the configured response mode.
    """

    email: str = Field("", description="Account email address")


class NewPasswordRequest(BaseModel):
    """
    New password HTTP request payload
    """

    password: str = Field("", description="New password")


@router.get("")
async def get_forgot_password(
    login: Optional[str] = Cookie(None),
    current_email: Optional[str] = Depends(get_current_user_email),
    responder: ResponseRouter = Depends(get_response_router),
):
    """
    Forgot Password Form

    Interactive mode only; the email is pre-filled from the signed-in
    user, falling back to the login cookie.

    Raises:
        - 404 Not Found: REST mode has no form
    """
    form = responder.request_form(email=current_email or login)
    if form is None:
        raise ClientError(Error("NOT_FOUND", "Not found"), status_code=status.HTTP_404_NOT_FOUND)
    return to_http_response(form)


@router.post("")
async def post_forgot_password(
    request: ForgotPasswordRequest,
    config=Depends(get_config),
    manager: ResetTokenManager = Depends(get_reset_token_manager),
    responder: ResponseRouter = Depends(get_response_router),
):
    """
    Request Password Reset

    Issues a reset token and sends the reset link.

    Security:
        - With REVEAL_ACCOUNT_EXISTENCE off, an unknown email is answered
          exactly like a successful request (no enumeration)

    Returns:
        - 204 No Content (REST) / post-forgot-password view: Link sent
        - 403 Forbidden: Invalid email, unknown/invalid account, unverified email
        - 500 Internal Server Error: Mail or store failure
    """
    result = await manager.request_reset(request.email)
    return await dispatch(
        responder, result, conceal_missing_account=not config.REVEAL_ACCOUNT_EXISTENCE
    )


@router.get("/{token}")
async def get_reset_token(
    token: str,
    manager: ResetTokenManager = Depends(get_reset_token_manager),
    responder: ResponseRouter = Depends(get_response_router),
):
    """
    Inspect Reset Token

    Checks a reset link before the new password is chosen.
    An expired token is cleared as a side effect.

    Returns:
        - 204 No Content (REST) / get-new-password view: Token valid
        - 403 Forbidden (REST) / link-expired view: Token expired
        - 404 Not Found: Unknown, malformed or already used token
    """
    result = await manager.inspect_token(token)
    return await dispatch(responder, result)


@router.post("/{token}")
async def post_reset_token(
    token: str,
    request: NewPasswordRequest,
    manager: ResetTokenManager = Depends(get_reset_token_manager),
    responder: ResponseRouter = Depends(get_response_router),
):
    """
    Confirm Password Reset

    Consumes the token and replaces the password. Single-use.

    Returns:
        - 204 No Content (REST) / change-password-success view: Password changed
        - 403 Forbidden: Token expired or password rejected
        - 404 Not Found: Unknown, malformed or already used token
    """
    result = await manager.consume_token(token, request.password)
    return await dispatch(responder, result)
