import logging
from typing import List, Union

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile

from storygen.background.tasks import generate_stories_task
from storygen.database.repository import GenerationRepository
from storygen.database.session import get_db, get_session_factory
from storygen.errors import ExtractionError
from storygen.routes.common import parse_id
from storygen.schemas import DocumentResponse, GenerationResponse, UploadResponse
from storygen.services.extraction import extract_text
from storygen.services.generation import GenerationClient, get_generation_client
from storygen.utils.text import clean_text
from storygen.utils.uploads import save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])


@router.post("/upload", response_model=UploadResponse)
async def upload_document(
    background_tasks: BackgroundTasks,
    # A text part or a file part with no filename arrives as a str
    document: Union[UploadFile, str, None] = File(None),
    db: Session = Depends(get_db),
    client: GenerationClient = Depends(get_generation_client),
    session_factory=Depends(get_session_factory),
):
    if not isinstance(document, StarletteUploadFile) or not document.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    tmp_path = await save_upload(document)
    try:
        content = await run_in_threadpool(extract_text, tmp_path, document.filename)
    except ExtractionError as e:
        logger.warning(f"Extraction failed for {document.filename}: {e}")
        raise HTTPException(status_code=400, detail=f"Failed to process file: {e}")
    finally:
        tmp_path.unlink(missing_ok=True)

    content = clean_text(content)
    if not content.strip():
        raise HTTPException(status_code=400, detail="Document appears to be empty or unreadable")

    doc, generation = await run_in_threadpool(
        GenerationRepository(db).create_document_with_generation, document.filename, content
    )

    # Runs after the response is sent
    background_tasks.add_task(generate_stories_task, generation.id, content, client, session_factory)

    return UploadResponse(
        document_id=doc.id,
        generation_id=generation.id,
        message="Document uploaded successfully. Processing started.",
    )


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(document_id: str, db: Session = Depends(get_db)):
    doc = GenerationRepository(db).get_document(parse_id(document_id, "document"))
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")
    return doc


@router.get("/{document_id}/generations", response_model=List[GenerationResponse])
def list_document_generations(document_id: str, db: Session = Depends(get_db)):
    return GenerationRepository(db).get_generations_by_document(parse_id(document_id, "document"))
