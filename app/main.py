import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .routers import availability, events, members

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="SyncUp Availability API",
    version="1.0.0",
    description="Group availability grid, slot ranking and event locking",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS for docs UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(events.router)
app.include_router(members.router)
app.include_router(availability.router)


@app.get("/")
def read_root():
    return {"message": "SyncUp Availability API", "status": "running"}
