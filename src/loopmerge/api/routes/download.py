"""Download endpoint."""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from loopmerge.api.dependencies import get_temp_store
from loopmerge.models.errors import NotFoundError
from loopmerge.storage.temp_store import TempArtifactManager

router = APIRouter(tags=["download"])


@router.get("/download/{filename}")
async def download_output(
    filename: str,
    store: TempArtifactManager = Depends(get_temp_store),
):
    """Download a produced artifact."""
    path = store.resolve_output(filename)
    if path is None:
        raise NotFoundError("File does not exist", details={"filename": filename})

    return FileResponse(path=path, filename=filename)
