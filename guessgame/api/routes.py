"""HTTP route handlers for users, scores, leaderboard queries and health checks."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request

from guessgame.api.errors import APIError, user_not_found, validation_failed
from guessgame.config import Settings
from guessgame.models.domain import NewGameScore
from guessgame.models.schemas import (
    IDENTIFIER_PATTERN,
    GameHistoryResponse,
    GameRecordOut,
    HealthResponse,
    LeaderboardResponse,
    LeaderboardRow,
    LeaderboardStatsResponse,
    PaginationOut,
    ReadyResponse,
    ScoreSubmission,
    UserCreate,
    UserListResponse,
    UserOut,
    UserRankResponse,
    UserStatsOut,
    UserStatsResponse,
    UserSummary,
    UserUpdate,
)
from guessgame.services.errors import (
    EmailAlreadyRegisteredError,
    ScoreValidationError,
    UserNotFoundError,
)
from guessgame.services.leaderboard import LeaderboardBuilder, RankLookup
from guessgame.services.scores import ScoreRecorder
from guessgame.services.stats import StatsAggregator
from guessgame.services.users import UserService

router = APIRouter(prefix="/v1")

UserId = Annotated[str, Path(pattern=IDENTIFIER_PATTERN)]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_score_recorder(request: Request) -> ScoreRecorder:
    return request.app.state.score_recorder


def get_stats_aggregator(request: Request) -> StatsAggregator:
    return request.app.state.stats_aggregator


def get_leaderboard_builder(request: Request) -> LeaderboardBuilder:
    return request.app.state.leaderboard_builder


def get_rank_lookup(request: Request) -> RankLookup:
    return request.app.state.rank_lookup


@router.post("/users", response_model=UserOut, status_code=201)
async def create_user(
    payload: UserCreate,
    service: UserService = Depends(get_user_service),
) -> UserOut:
    try:
        user = await service.create_user(payload.name, payload.email, payload.role)
    except EmailAlreadyRegisteredError as exc:
        raise APIError(
            code="EMAIL_TAKEN",
            message="A user with this email already exists",
            status_code=409,
        ) from exc
    return UserOut.model_validate(user)


@router.get("/users", response_model=UserListResponse)
async def list_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    service: UserService = Depends(get_user_service),
) -> UserListResponse:
    result = await service.list_users(page, limit)
    return UserListResponse(
        users=[UserOut.model_validate(u) for u in result.users],
        pagination=PaginationOut.model_validate(result.pagination),
    )


@router.get("/users/{user_id}", response_model=UserOut)
async def get_user(
    user_id: UserId,
    service: UserService = Depends(get_user_service),
) -> UserOut:
    try:
        user = await service.get_user(user_id)
    except UserNotFoundError as exc:
        raise user_not_found(user_id) from exc
    return UserOut.model_validate(user)


@router.put("/users/{user_id}", response_model=UserOut)
async def update_user(
    payload: UserUpdate,
    user_id: UserId,
    service: UserService = Depends(get_user_service),
) -> UserOut:
    try:
        user = await service.update_user(
            user_id, name=payload.name, email=payload.email, role=payload.role
        )
    except UserNotFoundError as exc:
        raise user_not_found(user_id) from exc
    except EmailAlreadyRegisteredError as exc:
        raise APIError(
            code="EMAIL_TAKEN",
            message="A user with this email already exists",
            status_code=409,
        ) from exc
    return UserOut.model_validate(user)


# Soft delete: the account and its game records stay, it only leaves user listings.
@router.delete("/users/{user_id}", response_model=UserOut)
async def deactivate_user(
    user_id: UserId,
    service: UserService = Depends(get_user_service),
) -> UserOut:
    try:
        user = await service.deactivate_user(user_id)
    except UserNotFoundError as exc:
        raise user_not_found(user_id) from exc
    return UserOut.model_validate(user)


@router.post("/users/{user_id}/scores", response_model=GameRecordOut, status_code=201)
async def record_score(
    payload: ScoreSubmission,
    user_id: UserId,
    recorder: ScoreRecorder = Depends(get_score_recorder),
) -> GameRecordOut:
    game = NewGameScore(user_id=user_id, **payload.model_dump())
    try:
        record = await recorder.record_score(game)
    except UserNotFoundError as exc:
        raise user_not_found(user_id) from exc
    except ScoreValidationError as exc:
        raise validation_failed(str(exc)) from exc
    return GameRecordOut.model_validate(record)


@router.get("/users/{user_id}/stats", response_model=UserStatsResponse)
async def get_user_stats(
    user_id: UserId,
    aggregator: StatsAggregator = Depends(get_stats_aggregator),
) -> UserStatsResponse:
    try:
        result = await aggregator.get_user_stats(user_id)
    except UserNotFoundError as exc:
        raise user_not_found(user_id) from exc
    return UserStatsResponse(
        user=UserSummary.model_validate(result.user),
        stats=UserStatsOut.model_validate(result.stats),
    )


@router.get("/users/{user_id}/history", response_model=GameHistoryResponse)
async def get_user_history(
    user_id: UserId,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
    recorder: ScoreRecorder = Depends(get_score_recorder),
    settings: Settings = Depends(get_settings),
) -> GameHistoryResponse:
    try:
        history = await recorder.get_user_game_history(
            user_id, page, limit or settings.history_page_size
        )
    except UserNotFoundError as exc:
        raise user_not_found(user_id) from exc
    return GameHistoryResponse(
        games=[GameRecordOut.model_validate(r) for r in history.records],
        pagination=PaginationOut.model_validate(history.pagination),
    )


@router.get("/users/{user_id}/rank", response_model=UserRankResponse)
async def get_user_rank(
    user_id: UserId,
    lookup: RankLookup = Depends(get_rank_lookup),
) -> UserRankResponse:
    try:
        entry = await lookup.get_user_rank(user_id)
    except UserNotFoundError as exc:
        raise user_not_found(user_id) from exc

    if entry is None:
        return UserRankResponse(user_id=user_id, ranked=False)
    return UserRankResponse(
        user_id=user_id,
        ranked=True,
        entry=LeaderboardRow.model_validate(entry, from_attributes=True),
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    limit: int | None = Query(default=None),
    builder: LeaderboardBuilder = Depends(get_leaderboard_builder),
    settings: Settings = Depends(get_settings),
) -> LeaderboardResponse:
    if limit is None:
        limit = settings.leaderboard_default_limit
    if not 1 <= limit <= settings.leaderboard_max_limit:
        raise APIError(
            code="VALIDATION_ERROR",
            message="Request validation failed",
            status_code=400,
            details={
                "errors": [
                    {
                        "loc": ["query", "limit"],
                        "msg": f"limit must be between 1 and {settings.leaderboard_max_limit}",
                    }
                ]
            },
        )

    entries = await builder.build_leaderboard(limit)
    return LeaderboardResponse(
        limit=limit,
        results=[LeaderboardRow.model_validate(e, from_attributes=True) for e in entries],
    )


@router.get("/leaderboard/stats", response_model=LeaderboardStatsResponse)
async def get_leaderboard_stats(
    builder: LeaderboardBuilder = Depends(get_leaderboard_builder),
) -> LeaderboardStatsResponse:
    stats = await builder.get_leaderboard_stats()
    return LeaderboardStatsResponse.model_validate(stats)


# These probes are intended for infrastructure and do not need to appear in API docs.
@router.get("/healthz", response_model=HealthResponse, include_in_schema=False)
async def healthz() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get("/readyz", response_model=ReadyResponse, include_in_schema=False)
async def readyz(request: Request) -> ReadyResponse:
    try:
        # Readiness verifies backing Redis connectivity, not just process liveness.
        is_ready = await request.app.state.redis.ping()
    except Exception as exc:
        raise APIError(
            code="STORE_UNAVAILABLE",
            message="Redis readiness check failed",
            status_code=503,
        ) from exc

    if not is_ready:
        raise APIError(
            code="STORE_UNAVAILABLE",
            message="Redis readiness check failed",
            status_code=503,
        )
    return ReadyResponse(status="ok")
