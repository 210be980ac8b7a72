from fastapi import APIRouter, Request

from macrodesk.config import settings

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/ready")
def ready(request: Request):
    catalog = getattr(request.app.state, "catalog", None)
    repository = getattr(request.app.state, "profile_repository", None)

    catalog_loaded = catalog is not None
    storage_ready = repository is not None and repository.profiles_dir.is_dir()

    return {
        "status": "ready" if catalog_loaded and storage_ready else "not_ready",
        "catalog_loaded": catalog_loaded,
        "instruments": len(catalog.instruments) if catalog_loaded else 0,
        "storage_ready": storage_ready,
        "fred_configured": bool((settings.FRED_API_KEY or "").strip()),
    }
