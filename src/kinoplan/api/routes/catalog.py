"""Catalog artifact endpoints polled by cache clients."""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse, Response

from kinoplan.config import settings
from kinoplan.services.catalog_exporter import SNAPSHOT_FILENAME, VERSION_FILENAME

router = APIRouter()


def get_export_dir() -> Path:
    """Dependency returning the directory of the last export."""
    return settings.export_dir


def _read_artifact(path: Path) -> bytes:
    if not path.exists():
        raise HTTPException(status_code=404, detail="Catalog has not been exported yet")
    return path.read_bytes()


@router.get("/catalog")
async def get_catalog(export_dir: Path = Depends(get_export_dir)) -> Response:
    """Return the full snapshot document of the last export."""
    content = _read_artifact(export_dir / SNAPSHOT_FILENAME)
    return Response(
        content=content,
        media_type="application/json",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/catalog/version", response_class=PlainTextResponse)
async def get_catalog_version(export_dir: Path = Depends(get_export_dir)) -> PlainTextResponse:
    """Return the version marker of the last export as plain text."""
    content = _read_artifact(export_dir / VERSION_FILENAME)
    return PlainTextResponse(content.decode("utf-8").strip(), headers={"Cache-Control": "no-cache"})
