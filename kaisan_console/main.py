from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from kaisan_console.application.dtos.common_dto import HealthResponse
from kaisan_console.infrastructure.api.dependencies import get_session_events, get_workspaces
from kaisan_console.infrastructure.api.errors import add_exception_handlers
from kaisan_console.infrastructure.api.middlewares import add_default_middlewares
from kaisan_console.infrastructure.api.routes.auth_routes import router as auth_router
from kaisan_console.infrastructure.api.routes.knowledge_routes import router as knowledge_router
from kaisan_console.infrastructure.api.routes.navigation_routes import router as navigation_router
from kaisan_console.infrastructure.api.routes.profile_routes import router as profile_router
from kaisan_console.infrastructure.api.routes.prompt_routes import router as prompt_router
from kaisan_console.infrastructure.api.routes.reset_memory_routes import router as reset_memory_router
from kaisan_console.infrastructure.api.routes.whatsapp_routes import router as whatsapp_router
from kaisan_console.infrastructure.database.postgres_client import close_postgres_client
from kaisan_console.infrastructure.notifications.webhook_notifier import knowledge_webhook_mode

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # signing out drops the user's workspace and its unsaved state
    subscription = get_session_events().subscribe(get_workspaces().on_session_event)
    logger.info("Kaisan console started")
    try:
        yield
    finally:
        subscription.unsubscribe()
        get_workspaces().clear()
        close_postgres_client()


def create_app() -> FastAPI:
    configure_logging()
    # raises ValueError on an unknown KB_WEBHOOK_MODE
    logger.info("Knowledge webhook mode: %s", knowledge_webhook_mode())
    app = FastAPI(
        title="Kaisan Console",
        version="0.1.0",
        description="""
        ## Kaisan Console API

        Administration console of the Kaisan WhatsApp AI agent. Supabase
        provides authentication and the record store.

        ### Features
        - **Authentication**: Sign in, sign up and password recovery
        - **System Prompt**: Edit the prompt that drives the agent
        - **Knowledge Base**: Question/answer pairs, announced to the agent by webhook
        - **WhatsApp**: Contact number stored on the user's profile
        - **Reset Memory**: Clear the agent's history with a phone number
        - **Profile**: Name, birth date, phone and address

        ### Authentication
        Console pages require a session, sent either in the session cookies
        set by `/auth/login` or as a Bearer token:
        ```
        Authorization: Bearer your-jwt-token
        ```
        Requests without a session are redirected to the login screen (`/`).

        ### Error Responses
        - **400 Bad Request**: Form validation failed or the auth service refused the request
        - **404 Not Found**: The record does not exist
        - **409 Conflict**: Navigation held back by unsaved changes (retry with `?confirm=true`)
        - **422 Unprocessable Entity**: Malformed request body
        - **502 Bad Gateway**: The record store or a webhook failed
        """,
        lifespan=lifespan,
    )
    add_default_middlewares(app)
    add_exception_handlers(app)

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the console service is running",
    )
    def health():
        """Check API health status."""
        return HealthResponse(status="healthy")

    app.include_router(auth_router)
    app.include_router(whatsapp_router)
    app.include_router(prompt_router)
    app.include_router(knowledge_router)
    app.include_router(reset_memory_router)
    app.include_router(profile_router)
    app.include_router(navigation_router)
    return app


app = create_app()
