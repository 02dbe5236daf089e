import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .database import init_db
from .errors import QuizError
from .globals import vocab_manager
from .log_handler import SQLiteHandler
from .router import router


# --- Logging Setup ---
def setup_logging():
    logger = logging.getLogger("synquest")
    logger.setLevel(logging.INFO)

    if not os.path.exists(settings.LOG_DIR):
        os.makedirs(settings.LOG_DIR, exist_ok=True)
    log_path = os.path.join(settings.LOG_DIR, settings.LOG_FILE)
    if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    if settings.LOG_TO_DB and not any(isinstance(h, SQLiteHandler) for h in logger.handlers):
        init_db()
        logger.addHandler(SQLiteHandler())

    # Also configure root logger to see logs from other libraries
    logging.basicConfig(level=logging.INFO)


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    vocab_manager.load_all()
    yield


# --- Error handling ---
async def quiz_error_handler(request: Request, exc: QuizError):
    logging.getLogger("synquest").warning(f"{exc.kind}: {exc} [{request.url.path}]")
    return JSONResponse({"error": str(exc), "kind": exc.kind}, status_code=exc.status_code)


# --- App Factory ---
def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(
        title=settings.PROJECT_NAME,
        debug=settings.DEBUG,
        lifespan=lifespan,
        root_path=settings.ROOT_PATH,
    )

    app.add_exception_handler(QuizError, quiz_error_handler)
    app.include_router(router)

    return app
