from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketlens.api.routes import research
from marketlens.config import settings
from marketlens.services.research_service import ResearchService


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    app.state.research_service = ResearchService()
    yield
    # Shutdown
    await app.state.research_service.shutdown()


app = FastAPI(
    title="MarketLens",
    description="Market research: search, topic clustering and LLM insights",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(research.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "marketlens"}
