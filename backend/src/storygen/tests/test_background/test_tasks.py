# tests/test_background/test_tasks.py

import threading

import pytest
from unittest.mock import AsyncMock

from storygen.background.tasks import generate_stories_task
from storygen.database.repository import GenerationRepository
from storygen.errors import MalformedResponse, MissingCredential
from storygen.schemas import GenerationResult

from payloads import make_result


@pytest.fixture
def processing_generation(db_session):
    repo = GenerationRepository(db_session)
    doc = repo.create_document(filename="brief.txt", content="Build a portal.")
    return repo.create_generation(document_id=doc.id)


def _reload(session_factory, generation_id):
    db = session_factory()
    try:
        return GenerationRepository(db).get_generation(generation_id)
    finally:
        db.close()


@pytest.mark.asyncio
async def test_task_success(processing_generation, session_factory, generation_client, mock_completion, generation_result):
    await generate_stories_task(processing_generation.id, "Build a portal.", generation_client, session_factory)

    record = _reload(session_factory, processing_generation.id)
    assert record.status == "completed"
    assert record.epics == generation_result["epics"]
    assert record.completed_at is not None


@pytest.mark.asyncio
async def test_task_records_structured_failure(processing_generation, session_factory):
    client = AsyncMock()
    client.generate.side_effect = MissingCredential()

    await generate_stories_task(processing_generation.id, "text", client, session_factory)

    record = _reload(session_factory, processing_generation.id)
    assert record.status == "failed"
    assert record.epics["code"] == "missing_credential"
    assert "API key" in record.epics["error"]
    assert record.completed_at is not None


@pytest.mark.asyncio
async def test_task_records_unexpected_exception(processing_generation, session_factory):
    client = AsyncMock()
    client.generate.side_effect = RuntimeError("socket exploded")

    await generate_stories_task(processing_generation.id, "text", client, session_factory)

    record = _reload(session_factory, processing_generation.id)
    assert record.status == "failed"
    assert record.epics == {"error": "socket exploded", "code": "internal_error"}


@pytest.mark.asyncio
async def test_task_does_not_overwrite_terminal_generation(processing_generation, session_factory):
    client = AsyncMock()
    client.generate.side_effect = MalformedResponse("Failed to parse JSON response: no JSON object found")
    await generate_stories_task(processing_generation.id, "text", client, session_factory)

    client.generate.side_effect = None
    client.generate.return_value = GenerationResult.model_validate(make_result())
    await generate_stories_task(processing_generation.id, "text", client, session_factory)

    record = _reload(session_factory, processing_generation.id)
    assert record.status == "failed"
    assert record.epics["code"] == "malformed_response"


@pytest.mark.asyncio
async def test_store_failure_is_only_logged(processing_generation, caplog):
    client = AsyncMock()
    client.generate.return_value = GenerationResult.model_validate(make_result())

    def broken_factory():
        raise RuntimeError("database is gone")

    # Must not raise
    await generate_stories_task(processing_generation.id, "text", client, broken_factory)

    assert "Could not record outcome of generation" in caplog.text


@pytest.mark.asyncio
async def test_outcome_is_written_off_the_event_loop_thread(processing_generation, session_factory):
    client = AsyncMock()
    client.generate.return_value = GenerationResult.model_validate(make_result())
    loop_thread = threading.get_ident()
    writer_threads = []

    def tracking_factory():
        writer_threads.append(threading.get_ident())
        return session_factory()

    await generate_stories_task(processing_generation.id, "text", client, tracking_factory)

    assert writer_threads and writer_threads[0] != loop_thread
    assert _reload(session_factory, processing_generation.id).status == "completed"
