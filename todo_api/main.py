import logging
import time
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from todo_api.config import get_settings
from todo_api.database import create_db_and_tables
from todo_api.dependencies import get_online_client
from todo_api.errors import register_exception_handlers
from todo_api.routers import todos, users

settings = get_settings()

# Logging setup
logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    yield
    if get_online_client.cache_info().currsize:
        get_online_client().close()
        get_online_client.cache_clear()


app = FastAPI(title="Todo API", version="1.0.0", lifespan=lifespan, debug=settings.debug)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time"],
)

register_exception_handlers(app)


@app.middleware("http")
async def add_process_time(request: Request, call_next):
    """Add processing time header."""
    start = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Process-Time"] = f"{time.perf_counter() - start:.4f}"
    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.info(f"→ {request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"← {request.method} {request.url.path} [{response.status_code}]")
    return response


api = APIRouter(prefix="/api/v1")


@api.get("/health", tags=["health"])
def health():
    return {"status": "ok", "message": "Todo API is running"}


api.include_router(users.router)
api.include_router(todos.router)
app.include_router(api)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    logger.info(f"Server starting on port {settings.server_port}")
    uvicorn.run(
        "todo_api.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )
