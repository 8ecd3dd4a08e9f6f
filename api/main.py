import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arsipedia import router as arsipedia_router
from auth import router as auth_router
from core import db
from core.logging import configure_logging
from core.responses import register_exception_handlers
from designs import router as designs_router
from portfolio_links import router as portfolio_links_router

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


configure_logging()

app = FastAPI(lifespan=lifespan)

# Allow the frontend dev server to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router.router, tags=["auth"])
app.include_router(designs_router.router, tags=["designs"])
app.include_router(
    portfolio_links_router.owner_router,
    prefix="/api/architects/auth/portfolio-links",
    tags=["portfolio-links"],
)
app.include_router(
    portfolio_links_router.owner_router,
    prefix="/api/portfolio-links/architect/my-portfolio-links",
    tags=["portfolio-links"],
)
app.include_router(portfolio_links_router.public_router, tags=["portfolio-links"])
app.include_router(arsipedia_router.router, tags=["arsipedia"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "architect catalog api"}
