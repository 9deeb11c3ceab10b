import json

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.orm import Session

from storygen.database.models import GenerationStatus, utcnow
from storygen.database.repository import GenerationRepository
from storygen.database.session import get_db
from storygen.routes.common import parse_id
from storygen.schemas import GenerationResponse

router = APIRouter(prefix="/api/generations", tags=["Generations"])


def _get_or_404(db: Session, raw_id: str):
    generation = GenerationRepository(db).get_generation(parse_id(raw_id, "generation"))
    if not generation:
        raise HTTPException(status_code=404, detail="Generation not found")
    return generation


@router.get("/{generation_id}", response_model=GenerationResponse)
def get_generation(generation_id: str, db: Session = Depends(get_db)):
    return _get_or_404(db, generation_id)


@router.get("/{generation_id}/export")
def export_generation(generation_id: str, db: Session = Depends(get_db)):
    generation = _get_or_404(db, generation_id)
    if generation.status != GenerationStatus.COMPLETED.value:
        raise HTTPException(status_code=400, detail="Generation not completed yet")

    day = (generation.completed_at or utcnow()).date().isoformat()
    return Response(
        content=json.dumps(generation.epics, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="epics-and-stories-{day}.json"'},
    )
