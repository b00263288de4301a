import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from database import init_db
from services.outbox import connect_outbox, disconnect_outbox
from routers import treasury as treasury_router

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("app")
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",")

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Gateway boot: initializing storage and outbox")
    await init_db()
    await connect_outbox()
    yield
    logger.info("Gateway shutdown: closing connections")
    await disconnect_outbox()

app = FastAPI(title="Treasury Gateway", version="1.0.0", lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=CORS_ORIGINS, allow_credentials=True, allow_methods=["*"], allow_headers=["*"])

app.include_router(treasury_router.router, prefix="/v1", tags=["Treasury"])

@app.get("/health")
async def health():
    return {"status": "ok", "mode": "TREASURY"}
