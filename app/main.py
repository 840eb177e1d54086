import logging

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import CORS_ORIGINS, LOG_LEVEL
from app.core.database import get_db, get_db_instance, create_indexes, close_client
from app.core.errors import register_error_handlers, ok, UpstreamError
from app.users.router import router as users_router
from app.courses.course_router import router as course_router
from app.courses.enrollment_router import router as enrollment_router
from app.topics.router import router as topics_router
from app.submissions.router import router as submissions_router
from app.chat.router import router as chat_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(title="TechBuddies Learning API")


@app.on_event("startup")
async def startup_event():
    await create_indexes(get_db_instance())
    logger.info("Backend started")


@app.on_event("shutdown")
async def shutdown_event():
    close_client()


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# ==================== ROUTER REGISTRATION ====================
app.include_router(users_router)
app.include_router(course_router)
app.include_router(enrollment_router)
app.include_router(topics_router)
app.include_router(submissions_router)
app.include_router(chat_router)
# ============================================================


@app.get("/")
async def root():
    return {"message": "Backend is running"}


@app.get("/health")
async def health(db: AsyncIOMotorDatabase = Depends(get_db)):
    try:
        await db.command("ping")
    except Exception as e:
        logger.error("Database ping failed: %s", e)
        raise UpstreamError("Database unavailable")
    return ok("healthy", {"database": "UP"})
