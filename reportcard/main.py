from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from reportcard.core.config import settings
from reportcard.core.logger import logger
from contextlib import asynccontextmanager
from reportcard.core.database import engine, Base, AsyncSessionLocal
from reportcard.api.v1.api import api_router
from reportcard.models import assessment, mark, remark, scheme, subject
from reportcard.services.remark import RemarkService


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.PROJECT_NAME} in {settings.ENVIRONMENT} environment")
    logger.debug(f"Database URL: {settings.DATABASE_URL}")

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.success("Database initialised")
    except Exception as e:
        logger.critical(f"Database initialisation failed: {e}")
        raise

    if settings.SEED_REMARK_RULES_ON_STARTUP:
        async with AsyncSessionLocal() as session:
            created = await RemarkService.seed_rules_if_empty(session)
        if created:
            logger.info(f"Seeded {created} default remark rules")

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME}")
    await engine.dispose()
    logger.debug("Database engine disposed")

app = FastAPI(title=settings.PROJECT_NAME, version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_V1_STR)
