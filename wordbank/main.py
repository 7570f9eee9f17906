from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from wordbank.config import validate_mongo_settings
from wordbank.db import create_indexes, ping_db
from wordbank.logging_setup import configure_logging
from wordbank.routes.challenge import router as challenge_router
from wordbank.routes.quiz import router as quiz_router
from wordbank.routes.session import router as session_router
from wordbank.routes.stats import router as stats_router
from wordbank.routes.vocab import router as vocab_router
from wordbank.services.registry import get_registry


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    try:
        validate_mongo_settings()
        await ping_db()
        await create_indexes()
    except RuntimeError:
        raise
    except Exception as exc:
        raise RuntimeError(
            "Failed to start backend. Check MongoDB connection and env values (MONGO_URL, MONGO_DB)."
        ) from exc
    logger.info("Word bank backend ready")
    yield
    await get_registry().flush_all()


app = FastAPI(title="Word Bank Scheduler", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(vocab_router)
app.include_router(session_router)
app.include_router(quiz_router)
app.include_router(stats_router)
app.include_router(challenge_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
