"""
Postboard Backend — Uploaded Image Route
==========================================

What:  GET /images/{filename} serves images stored by FileService.
Why:   posts.image_path holds absolute URLs pointing here.

Security:
    The resolved path must stay inside images_root; anything that escapes it
    (../, absolute paths) is rejected before touching the file system.
"""

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

from postboard.config import settings
from postboard.exceptions import NotFoundError, ValidationError

router = APIRouter(tags=["Images"])


@router.get(
    "/images/{filename:path}",
    summary="Serve an uploaded image",
    responses={
        200: {"description": "Image file"},
        404: {"description": "Image not found"},
    },
)
async def serve_image(filename: str) -> FileResponse:
    images_root = Path(settings.images_root).resolve()
    full_path = (images_root / filename).resolve()

    if not full_path.is_relative_to(images_root):
        raise ValidationError(message="Invalid file path")

    if not full_path.is_file():
        raise NotFoundError(message="Image not found!", resource="image", resource_id=filename)

    # media_type is inferred from the extension (.png / .jpg)
    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
