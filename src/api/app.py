from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


def create_app(ApplicationConfig) -> FastAPI:
    app = FastAPI(title="Password Recovery API", version="0.1.0")
    app.state.config = ApplicationConfig

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import health_check, password_reset
    from src.depends import reset_route_prefix

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(
        password_reset.router,
        prefix=reset_route_prefix(ApplicationConfig),
        tags=["Password Reset"],
    )

    app.add_exception_handler(ClientError, handle_client_error)

    return app
