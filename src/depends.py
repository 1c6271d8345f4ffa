from datetime import datetime, timedelta
from typing import Callable, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.bcrypt_credential_hasher import BcryptCredentialHasher
from src.adapter.services.notifiers import LoggingNotifier, SmtpNotifier
from src.adapter.services.token_codec import UrlSafeTokenCodec
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.lifecycle_observers import AuditTrailObserver, LoggingObserver
from src.app.services.notifier import INotifier
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.password_reset import (
    ResetPolicy,
    ResetTokenManager,
    ResponseRouter,
    build_strategy,
)
from src.domain.base import utcnow
from src.domain.entities import ResponseMode

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


def reset_route_prefix(config) -> str:
    """Reset routes live under /rest when the boundary is machine-readable"""
    if ResponseMode(config.RESPONSE_MODE) == ResponseMode.rest:
        return "/rest" + config.RESET_ROUTE
    return config.RESET_ROUTE


def reset_policy(config) -> ResetPolicy:
    return ResetPolicy(
        token_ttl=timedelta(seconds=config.RESET_TOKEN_TTL_SECONDS),
        require_email_verified=config.REQUIRE_EMAIL_VERIFIED,
        min_password_length=config.MIN_PASSWORD_LENGTH,
    )


def get_config(request: Request):
    return request.app.state.config


def get_current_user_email(request: Request) -> Optional[str]:
    """Email of the signed-in user, when the host app's auth middleware set request.state.user"""
    user = getattr(request.state, "user", None)
    return getattr(user, "email", None)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_clock() -> Callable[[], datetime]:
    return utcnow


def get_notifier(config=Depends(get_config)) -> INotifier:
    route = reset_route_prefix(config)
    if config.MAIL_BACKEND == "smtp":
        return SmtpNotifier(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            sender=config.MAIL_FROM,
            base_url=config.RESET_LINK_BASE_URL,
            route=route,
            username=config.SMTP_USER,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_USE_TLS,
        )
    return LoggingNotifier(base_url=config.RESET_LINK_BASE_URL, route=route)


def get_reset_token_manager(
    config=Depends(get_config),
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotifier = Depends(get_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> ResetTokenManager:
    return ResetTokenManager(
        uow,
        codec=UrlSafeTokenCodec(config.RESET_TOKEN_BYTES),
        hasher=BcryptCredentialHasher(config.BCRYPT_ROUNDS),
        notifier=notifier,
        policy=reset_policy(config),
        clock=clock,
    )


def get_response_router(
    config=Depends(get_config),
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> ResponseRouter:
    return ResponseRouter(
        build_strategy(config.RESPONSE_MODE, config.RESET_VIEWS),
        observers=[LoggingObserver(), AuditTrailObserver(uow)],
    )
