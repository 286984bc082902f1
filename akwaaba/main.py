import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from akwaaba.db import Base, engine
import akwaaba.models  # noqa: F401 ensure models are imported so tables are known
from akwaaba.api.routes import router as api_router
from akwaaba.scheduler import start_scheduler, stop_scheduler
from akwaaba.utils import logger

app = FastAPI(title="Akwaaba Homes API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)
    start_scheduler()
    logger.info("Akwaaba Homes API started")


@app.on_event("shutdown")
def on_shutdown():
    stop_scheduler()
