"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from telehealth_ussd.api.admin import router as admin_router
from telehealth_ussd.api.ussd_models import UssdRequest, UssdResponse
from telehealth_ussd.app_logging import configure_logging
from telehealth_ussd.containers import AppContainer
from telehealth_ussd.domain.menus import UssdReply
from telehealth_ussd.services.ussd import MalformedUssdRequestError

_MALFORMED_REPLY = UssdReply.end(
    "Invalid request. Missing sessionId or phoneNumber."
)
_RECOVERY_REPLY = UssdReply.con(
    "An error occurred. Please try again.\n\n1. Retry\n0. Exit"
)
USSD_SESSION_PATH = "/api/ussd/session"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container.sweeper.start()
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(RequestValidationError)
    async def ussd_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Answer unreadable gateway payloads with a USSD screen."""
        if request.url.path != USSD_SESSION_PATH:
            return await request_validation_exception_handler(request, exc)
        logger.warning("Rejected unreadable USSD request: %s", exc.errors())
        return _malformed_response()

    @app.get("/health")
    async def health(request: Request) -> dict[str, str]:
        """Simple health check endpoint."""
        state_container: AppContainer = request.app.state.container
        return {
            "status": "ok",
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "environment": state_container.settings.environment,
        }

    @app.post(USSD_SESSION_PATH, response_model=UssdResponse)
    async def ussd_session(
        payload: UssdRequest, request: Request
    ) -> UssdResponse | JSONResponse:
        """Handle one USSD gateway turn."""
        state_container: AppContainer = request.app.state.container
        try:
            reply = state_container.ussd_service.handle(
                session_id=payload.session_id,
                phone_number=payload.phone_number,
                text=payload.text,
                service_code=payload.service_code,
            )
        except MalformedUssdRequestError as exc:
            logger.warning("Rejected USSD request: %s", exc)
            return _malformed_response()
        except Exception as exc:
            logger.exception(
                "USSD request failed", extra={"session_id": payload.session_id}
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "response": _RECOVERY_REPLY.render(),
                    "error": _format_error(state_container, exc),
                },
            )
        return UssdResponse(response=reply.render())

    return app


def _malformed_response() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "response": _MALFORMED_REPLY.render(),
            "message": "Missing required parameters",
        },
    )


def _format_error(state_container: AppContainer, exc: Exception) -> str:
    """Return error detail for local debugging, a generic label elsewhere."""
    if state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return detail
    return "Server error"
