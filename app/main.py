import os, certifi
os.environ["SSL_CERT_FILE"] = certifi.where()
import time
from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.database import Base, engine, get_db
from app.errors import internal_error_handler, validation_exception_handler
from app.limiter import limiter
from app.logger import get_logger
from app.__version__ import __version__

# registers every table on Base.metadata
from app.models import brewery, sake, user  # noqa: F401
from app.routes import bookmarks, breweries, reviews, sakes, timeline, users
from fastapi.middleware.cors import CORSMiddleware

logger = get_logger("main")

app = FastAPI(title="Sake Review API", version=__version__)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, internal_error_handler)


Base.metadata.create_all(bind=engine)


START_TIME = time.time()
@app.get("/api/ping", include_in_schema=False)
def ping(db: Session = Depends(get_db)):
    """Readiness probe: 200 with uptime when the database answers, 503 otherwise."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.error("Database ping failed", exc_info=True)
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {
        "status": "ok",
        "uptime_seconds": int(time.time() - START_TIME),
        "service": "sake_review_api",
        "version": __version__,
    }


@app.get("/api/health")
def health_check():
    return {"status": "ok"}


# Include routers
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(breweries.router, prefix="/api/breweries", tags=["breweries"])
app.include_router(sakes.router, prefix="/api/sakes", tags=["sakes"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["reviews"])
app.include_router(timeline.router, prefix="/api/timeline", tags=["timeline"])
app.include_router(bookmarks.router, prefix="/api/bookmarks", tags=["bookmarks"])


app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def read_root():
    return {"message": "Welcome to the Sake Review API"}
