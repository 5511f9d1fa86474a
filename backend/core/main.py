from contextlib import asynccontextmanager

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi_injector import attach_injector
from sqlalchemy.exc import SQLAlchemyError

from api.routes import router
from domain.exceptions import PopChoiceError
from domain.interfaces import IVectorStoreRepository
from repositories.vector_store import PgvectorRepository
from services.ingestion_service import CorpusIngestionService, load_corpus

from .di import create_injector
from .log_config import setup_logging
from .settings import Settings

load_dotenv()
injector = create_injector()
setup_logging(dev_mode=injector.get(Settings).dev_mode)
logger = structlog.get_logger("popchoice")


async def seed_vector_store(settings: Settings) -> None:
    try:
        vectorstore = injector.get(IVectorStoreRepository)
        if isinstance(vectorstore, PgvectorRepository):
            await vectorstore.create_schema()
        if not settings.corpus_path:
            logger.info("No corpus configured, skipping seeding")
            return
        movies = load_corpus(settings.corpus_path)
        await injector.get(CorpusIngestionService).seed(movies)
    except (PopChoiceError, SQLAlchemyError, OSError) as e:
        logger.error("Error initializing the movies database", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = injector.get(Settings)
    # Missing credentials abort start-up before any request is served
    settings.validate_credentials()
    await seed_vector_store(settings)
    yield


app = FastAPI(title="PopChoice Recommendation API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    max_age=86400,
)
attach_injector(app, injector)
app.include_router(router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
