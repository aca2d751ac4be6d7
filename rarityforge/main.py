from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rarityforge.api import collections_router, health_router
from rarityforge.config import settings

app = FastAPI(
    title=settings.app_name,
    version=pkg_version("rarityforge"),
)

app.include_router(collections_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)
