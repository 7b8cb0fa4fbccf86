import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bidtracker.config import CORS_ALLOW_ORIGINS, LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s %(message)s")
from fastapi.middleware.cors import CORSMiddleware

from bidtracker.database import engine
from bidtracker.models.base import Base
import bidtracker.models  # noqa: F401 - register AuditEvent etc. for create_all
from bidtracker.api.endpoints import admin, bids


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(title="Bid Tracker API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(bids.router)
app.include_router(admin.router)


@app.get("/health")
def health():
    """Health check endpoint for load balancers and readiness probes."""
    return {"status": "ok", "service": "bid-tracker-backend"}
