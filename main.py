import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from crud.api.v1.endpoints import (
    allocations, assignments, auth, borrowings, competitions, dashboard,
    history, inventory, projects, reports, requests, users
)
from crud.errors import LabError
from database import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("lab_inventory")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("%s started (%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)
    yield


app = FastAPI(title=settings.PROJECT_NAME, version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.exception("Error processing %s %s", request.method, request.url.path)
        detail = "Internal server error" if settings.is_production else f"Internal server error: {e}"
        return JSONResponse(status_code=500, content={"detail": detail})
    elapsed = time.perf_counter() - start
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed * 1000)
    return response


@app.exception_handler(LabError)
async def lab_error_handler(request: Request, exc: LabError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


api = settings.API_V1_STR
app.include_router(auth.router, prefix=f"{api}/auth", tags=["auth"])
app.include_router(users.router, prefix=f"{api}/users", tags=["users"])
app.include_router(inventory.router, prefix=f"{api}/items", tags=["items"])
app.include_router(allocations.router, prefix=f"{api}/allocations", tags=["allocations"])
app.include_router(requests.router, prefix=f"{api}/requests", tags=["requests"])
app.include_router(borrowings.router, prefix=f"{api}/borrowings", tags=["borrowings"])
app.include_router(history.router, prefix=f"{api}/history", tags=["history"])
app.include_router(projects.router, prefix=f"{api}/projects", tags=["projects"])
app.include_router(competitions.router, prefix=f"{api}/competitions", tags=["competitions"])
app.include_router(assignments.router, prefix=f"{api}/assignments", tags=["assignments"])
app.include_router(assignments.submissions_router, prefix=f"{api}/submissions", tags=["submissions"])
app.include_router(dashboard.router, prefix=f"{api}/dashboard", tags=["dashboard"])
app.include_router(reports.router, prefix=f"{api}/reports", tags=["reports"])


@app.get("/health", tags=["system"])
def health_check():
    return {"status": "ok", "timestamp": datetime.now().isoformat()}


if __name__ == '__main__':
    port = int(os.environ.get("PORT", 8000))

    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=False)
