"""
HTTP layer
Purpose: FastAPI glue. Parses JSON bodies, delegates every decision to the
controller and maps Discern errors to status codes. No dialogue logic here.

Run with: python api.py   (or: uvicorn api:create_app --factory)
"""

import logging
from typing import Any, Optional, Union

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, StrictInt, StrictStr

from discern.config import Settings
from discern.controller import ReflectionSessionController
from discern.errors import DiscernError
from discern.logging_config import configure_logging
from discern.persistence.session_store import InMemorySessionStore
from discern.services.llm_openai import OpenAILLMClient
from discern.services.signal_classifier import (
    LLMSignalClassifier,
    default_signal_settings,
)

VERSION = "1.0.0"

logger = logging.getLogger("discern.api")


class StartMomentRequest(BaseModel):
    sessionId: str
    momentId: Union[StrictInt, StrictStr]


class NextQuestionRequest(BaseModel):
    sessionId: str
    answer: str


class StartCustomRequest(BaseModel):
    sessionId: str
    situation: str


class AnalyticsEvent(BaseModel):
    event: str
    data: Optional[Any] = None


def build_controller(settings: Settings) -> ReflectionSessionController:
    """Wire the production controller: OpenAI-backed detector, TTL store."""
    llm = OpenAILLMClient(api_key=settings.openai_api_key or "")
    classifier = LLMSignalClassifier(llm, default_signal_settings(settings.model))
    store = InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)
    return ReflectionSessionController(classifier, store=store)


def create_app(
    controller: Optional[ReflectionSessionController] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    controller = controller or build_controller(settings)

    app = FastAPI(title="Discern", version=VERSION)
    app.state.controller = controller

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DiscernError)
    async def discern_error_handler(request: Request, exc: DiscernError):
        logger.info("%s %s -> %s", request.method, request.url.path, exc.code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
        )

    @app.post("/api/start-moment")
    def start_moment(body: StartMomentRequest):
        return controller.begin_moment(body.sessionId, body.momentId)

    @app.post("/api/next-question")
    def next_question(body: NextQuestionRequest):
        return controller.advance(body.sessionId, body.answer)

    @app.post("/api/start-custom")
    def start_custom(body: StartCustomRequest):
        return controller.begin_custom(body.sessionId, body.situation)

    @app.post("/api/analytics")
    def analytics(body: AnalyticsEvent):
        logger.info("analytics %s %s", body.event, body.data)
        return {"recorded": True}

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "version": VERSION,
            "sessions": len(controller.store),
        }

    return app


def main() -> None:
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
