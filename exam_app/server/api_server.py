"""FastAPI server exposing tests, rankings and results to other screens."""

from __future__ import annotations

from datetime import datetime
import logging
from threading import Thread

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel
import uvicorn

from exam_app.constants.about import APP_NAME, APP_VERSION
from exam_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from exam_app.core.errors import NotFound
from exam_app.core.markdown_math_renderer import renderer
from exam_app.core.portal_manager import PortalManager

logger = logging.getLogger(__name__)


class PublishedTest(BaseModel):
    """Published test as listed for a class."""

    id: str
    class_name: str
    subject: str
    title: str
    description_html: str
    duration_minutes: int


class LeaderboardRow(BaseModel):
    rank: int
    user_id: str
    display_name: str
    class_name: str
    avatar_url: str
    score: int
    total_questions: int
    test_title: str
    elapsed_seconds: float
    submitted_at: datetime


class ResultSummary(BaseModel):
    test_id: str
    test_title: str
    subject: str
    score: int
    total_questions: int
    submitted_at: datetime | None
    elapsed_seconds: float | None


def _get_portal_manager_dependency(portal_manager: PortalManager):
    def dependency() -> PortalManager:
        return portal_manager

    return dependency


def create_api_app(portal_manager: PortalManager) -> FastAPI:
    """Create a FastAPI application wired to the provided portal manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    manager_dep = _get_portal_manager_dependency(portal_manager)

    @app.get("/tests", response_model=list[PublishedTest])
    def list_tests(
        class_name: str | None = None,
        manager: PortalManager = Depends(manager_dep),
    ) -> list[PublishedTest]:
        return [
            PublishedTest(
                id=test.id,
                class_name=test.class_name,
                subject=test.subject,
                title=test.title,
                description_html=renderer.render_fragment(test.description) if test.description else "",
                duration_minutes=test.duration_minutes,
            )
            for test in manager.list_all_tests(class_name)
        ]

    @app.get("/leaderboard", response_model=list[LeaderboardRow])
    def get_leaderboard(
        test_id: str | None = None,
        limit: int | None = Query(default=None, ge=1, le=50),
        manager: PortalManager = Depends(manager_dep),
    ) -> list[LeaderboardRow]:
        if test_id is not None:
            try:
                manager.get_test(test_id)
            except NotFound as exc:
                raise HTTPException(status_code=404, detail=str(exc)) from exc
        entries = manager.get_leaderboard(limit=limit, test_id=test_id)
        return [
            LeaderboardRow(
                rank=entry.rank,
                user_id=entry.user_id,
                display_name=entry.display_name,
                class_name=entry.class_name,
                avatar_url=entry.avatar_url,
                score=entry.score,
                total_questions=entry.total_questions,
                test_title=entry.test_title,
                elapsed_seconds=entry.elapsed_seconds,
                submitted_at=entry.submitted_at,
            )
            for entry in entries
        ]

    @app.get("/results/{user_id}", response_model=list[ResultSummary])
    def get_results(
        user_id: str,
        manager: PortalManager = Depends(manager_dep),
    ) -> list[ResultSummary]:
        return [
            ResultSummary(
                test_id=row.test_id,
                test_title=row.test_title,
                subject=row.subject,
                score=row.score,
                total_questions=row.total_questions,
                submitted_at=row.submitted_at,
                elapsed_seconds=row.elapsed_seconds,
            )
            for row in manager.get_results(user_id)
        ]

    return app


def start_api_server(
    portal_manager: PortalManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(portal_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="ExamApiServer", daemon=True)
    thread.start()
    logger.info("API server listening on http://%s:%d/", host, port)
    return thread
