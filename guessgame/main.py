"""FastAPI application wiring for routes, error handlers, and lifespan."""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from redis.exceptions import RedisError

from guessgame.api.errors import APIError
from guessgame.api.routes import router
from guessgame.config import Settings, get_settings
from guessgame.logging_config import configure_logging
from guessgame.models.schemas import ErrorBody, ErrorResponse
from guessgame.services.leaderboard import LeaderboardBuilder, RankLookup
from guessgame.services.scores import Clock, ScoreRecorder, utc_now
from guessgame.services.stats import StatsAggregator
from guessgame.services.users import UserService
from guessgame.storage.records import GameRecordStore
from guessgame.storage.redis import create_redis_client
from guessgame.storage.users import UserDirectory

logger = logging.getLogger(__name__)

RedisFactory = Callable[[], Redis]


def wire_services(app: FastAPI, redis_client: Redis, settings: Settings, clock: Clock = utc_now) -> None:
    records = GameRecordStore(redis_client)
    users = UserDirectory(redis_client, clock=clock)
    builder = LeaderboardBuilder(records, users)

    app.state.redis = redis_client
    app.state.user_service = UserService(users)
    app.state.score_recorder = ScoreRecorder(records, users, clock=clock)
    app.state.stats_aggregator = StatsAggregator(records, users)
    app.state.leaderboard_builder = builder
    app.state.rank_lookup = RankLookup(builder, records, users, limit=settings.rank_lookup_limit)


def create_app(
    settings: Settings | None = None,
    redis_factory: RedisFactory | None = None,
    clock: Clock = utc_now,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def app_lifespan(app: FastAPI):
        redis_client = redis_factory() if redis_factory else create_redis_client(settings.redis_url)
        wire_services(app, redis_client, settings, clock=clock)
        logger.info("guessgame started redis=%s", settings.redis_url if redis_factory is None else "injected")
        try:
            yield
        finally:
            await redis_client.aclose()
            logger.info("guessgame stopped")

    app = FastAPI(title="Guessing Game API", version="1.0.0", lifespan=app_lifespan)
    app.state.settings = settings

    @app.exception_handler(APIError)
    async def api_error_handler(_: Request, exc: APIError) -> JSONResponse:
        payload = ErrorResponse(
            error=ErrorBody(code=exc.code, message=exc.message, details=exc.details),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=payload.model_dump(exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        payload = ErrorResponse(
            error=ErrorBody(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                # Inputs are not echoed back; they may hold values JSON cannot encode (inf, nan).
                details={"errors": jsonable_encoder(exc.errors(), exclude={"input"})},
            ),
        )
        return JSONResponse(status_code=400, content=payload.model_dump(exclude_none=True))

    @app.exception_handler(RedisError)
    async def store_error_handler(request: Request, exc: RedisError) -> JSONResponse:
        logger.error("store unavailable during %s %s: %s", request.method, request.url.path, exc)
        payload = ErrorResponse(
            error=ErrorBody(code="STORE_UNAVAILABLE", message="Backing store is unavailable"),
        )
        return JSONResponse(status_code=503, content=payload.model_dump(exclude_none=True))

    app.include_router(router)
    return app


app = create_app()
