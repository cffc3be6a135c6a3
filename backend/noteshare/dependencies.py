"""
NoteShare Backend - Collaborator Context & FastAPI Dependencies
=================================================================

What:  Bundles the four collaborators (identity, storage, catalog, OCR) into a
       ServiceContext and hands it to route handlers through Depends().
How:   build_service_context() wires the configured implementations once at
       startup (lifespan); the context lives on `app.state.services`.
       get_services() reads it back for each request.
Who:   main.py builds it; every route depends on get_services().

Tests pass their own context to create_app(context=...) and never touch
the network, the real database, or tesseract.
"""

from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from noteshare.config import Settings
from noteshare.services.catalog_service import CatalogStore, SqlCatalogStore
from noteshare.services.identity_service import IdentityProvider, SupabaseIdentityProvider
from noteshare.services.ocr_service import GeminiOCREngine, OCREngine, TesseractOCREngine
from noteshare.services.storage_service import (
    LocalObjectStorage,
    ObjectStorage,
    SupabaseObjectStorage,
)


@dataclass
class ServiceContext:
    """The collaborator clients shared by all requests."""

    identity: IdentityProvider
    storage: ObjectStorage
    catalog: CatalogStore
    ocr: OCREngine
    http_client: Optional[httpx.AsyncClient] = None

    async def aclose(self) -> None:
        """Release the shared HTTP connection pool."""
        if self.http_client is not None:
            await self.http_client.aclose()


def build_storage(settings: Settings, http_client: httpx.AsyncClient) -> ObjectStorage:
    if settings.storage_backend == "local":
        return LocalObjectStorage(
            root=settings.local_storage_root,
            public_base_url=settings.public_base_url,
            bucket=settings.storage_bucket,
        )
    return SupabaseObjectStorage(
        client=http_client,
        base_url=settings.supabase_url,
        api_key=settings.supabase_service_role_key,
        bucket=settings.storage_bucket,
    )


def build_ocr_engine(settings: Settings) -> OCREngine:
    if settings.ocr_engine == "gemini":
        return GeminiOCREngine(api_key=settings.gemini_api_key, model_name=settings.gemini_model)
    return TesseractOCREngine(language=settings.ocr_language, tesseract_cmd=settings.tesseract_cmd)


def build_service_context(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> ServiceContext:
    """
    Wire the configured collaborator implementations.

    One httpx.AsyncClient is shared by the identity and storage clients;
    it is closed by ServiceContext.aclose() on shutdown.
    """
    http_client = httpx.AsyncClient(timeout=settings.http_timeout)
    return ServiceContext(
        identity=SupabaseIdentityProvider(
            client=http_client,
            base_url=settings.supabase_url,
            api_key=settings.supabase_service_role_key,
        ),
        storage=build_storage(settings, http_client),
        catalog=SqlCatalogStore(session_factory),
        ocr=build_ocr_engine(settings),
        http_client=http_client,
    )


def get_services(request: Request) -> ServiceContext:
    """FastAPI dependency returning the application's ServiceContext."""
    return request.app.state.services
