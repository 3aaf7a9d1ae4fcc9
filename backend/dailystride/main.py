"""Main FastAPI application for the DailyStride backend."""
from fastapi import FastAPI, Request

from dailystride.api.routes.daily_tasks import router as daily_tasks_router
from dailystride.api.routes.goals import router as goals_router
from dailystride.api.routes.users import router as users_router
from dailystride.core.config import settings
from dailystride.core.logging import configure_logging
from dailystride.core.middleware import RequestIDMiddleware
from dailystride.observability.client import init_opik
from dailystride.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0", debug=settings.debug)
app.add_middleware(RequestIDMiddleware)
app.include_router(users_router)
app.include_router(daily_tasks_router)
app.include_router(goals_router)


@app.on_event("startup")
async def startup_observability() -> None:
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
