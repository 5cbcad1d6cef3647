"""Health check endpoint."""

from pathlib import Path

from fastapi import APIRouter, Depends

from kinoplan.api.routes.catalog import get_export_dir
from kinoplan.services.catalog_exporter import read_version

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check(export_dir: Path = Depends(get_export_dir)) -> dict[str, str | None]:
    """
    Health check endpoint.

    Returns:
        Status message and the version of the last catalog export, if any
    """
    version = read_version(export_dir)
    return {"status": "ok", "catalogVersion": version.isoformat() if version else None}
