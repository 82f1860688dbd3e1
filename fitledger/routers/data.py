from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlmodel import Session, SQLModel
from starlette.concurrency import run_in_threadpool

from fitledger.database import exclusive_access, get_session
from fitledger.errors import EmptyStore, MalformedDocument, NotARecognizedExport
from fitledger.services.cleanup import wipe_all
from fitledger.services.export import export_bytes, export_filename
from fitledger.services.importer import import_document

router = APIRouter()

SessionDep = Annotated[Session, Depends(get_session)]


class RestoreCountsRead(SQLModel):
    restored: int
    skipped: int


class ImportResult(SQLModel):
    stage: str
    counts: dict[str, RestoreCountsRead]


def _locked_import(data: bytes, session: Session):
    with exclusive_access():
        return import_document(data, session)


@router.get("/export")
def export_data(session: SessionDep):
    """Download the whole store as a JSON export document."""
    with exclusive_access():
        try:
            content = export_bytes(session)
        except EmptyStore as exc:
            raise HTTPException(status_code=409, detail=str(exc))
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.post("/import", response_model=ImportResult)
async def import_data(request: Request, session: SessionDep):
    """Replace everything in the store with the uploaded export document."""
    data = await request.body()
    try:
        summary = await run_in_threadpool(_locked_import, data, session)
    except (MalformedDocument, NotARecognizedExport) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return ImportResult(
        stage=summary.stage.value,
        counts={
            kind: RestoreCountsRead(restored=c.restored, skipped=c.skipped)
            for kind, c in summary.counts.items()
        },
    )


@router.delete("/", status_code=204)
def wipe_data(session: SessionDep):
    with exclusive_access():
        wipe_all(session)
