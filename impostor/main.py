# impostor/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from impostor import config
from impostor.cleanup import CleanupTask
from impostor.database import SessionLocal, init_db
from impostor.game_manager import GameManager
from impostor.routes import admin, rooms

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def create_app(session_factory=SessionLocal, manager: GameManager = None, run_cleanup: bool = True) -> FastAPI:
    """
    Build the application. The GameManager lives on app.state for the
    lifetime of the process.
    """
    manager = manager or GameManager(session_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(session_factory.kw["bind"])
        cleanup = CleanupTask(
            manager,
            interval_seconds=config.CLEANUP_INTERVAL_SECONDS if run_cleanup else 0,
            max_idle_minutes=config.STALE_ROOM_MINUTES,
            disconnect_timeout_seconds=config.DISCONNECT_TIMEOUT_SECONDS,
        )
        cleanup.start()
        logger.info("Impostor server ready")
        yield
        await cleanup.stop()

    app = FastAPI(title="Impostor", lifespan=lifespan)
    app.state.game_manager = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": first.get("msg", "Invalid request")},
        )

    # Include game routes
    app.include_router(rooms.router)
    app.include_router(admin.router)
    return app


app = create_app()
