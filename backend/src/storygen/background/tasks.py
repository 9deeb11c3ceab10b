import logging

from starlette.concurrency import run_in_threadpool

from storygen.database.models import GenerationStatus, utcnow
from storygen.database.repository import GenerationRepository
from storygen.errors import ErrorCode, GenerationError

logger = logging.getLogger(__name__)


def _record_outcome(session_factory, generation_id, status, epics):
    db = session_factory()
    try:
        GenerationRepository(db).update_generation_status(generation_id, status, epics, utcnow())
    finally:
        db.close()


async def generate_stories_task(generation_id: int, document_text: str, client, session_factory):
    """Run one generation and record its outcome.

    Scheduled after the upload response is sent; nothing awaits it. The only
    way the result leaves this function is the repository's terminal update.
    """
    try:
        try:
            result = await client.generate(document_text)
        except GenerationError as e:
            logger.warning(f"Generation {generation_id} failed [{e.code.value}]: {e}")
            status, epics = GenerationStatus.FAILED, e.to_payload()
        except Exception as e:
            logger.exception(f"Generation {generation_id} crashed")
            status, epics = GenerationStatus.FAILED, {"error": str(e), "code": ErrorCode.INTERNAL_ERROR.value}
        else:
            status, epics = GenerationStatus.COMPLETED, result.model_dump()["epics"]

        await run_in_threadpool(_record_outcome, session_factory, generation_id, status, epics)
    except Exception:
        # Nothing supervises this task; a failure here leaves the row processing
        logger.exception(f"Could not record outcome of generation {generation_id}")
