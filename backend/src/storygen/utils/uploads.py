import uuid
from pathlib import Path

from fastapi import HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from storygen.config.settings import settings

CHUNK_SIZE = 1024 * 1024


async def save_upload(upload: UploadFile, upload_dir: Path = None, max_bytes: int = None) -> Path:
    """Stream an upload to a temporary file, enforcing the size limit as it goes.

    The caller owns the returned path and must delete it.
    """
    upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
    max_bytes = max_bytes or settings.MAX_UPLOAD_BYTES
    upload_dir.mkdir(parents=True, exist_ok=True)
    path = upload_dir / uuid.uuid4().hex

    size = 0
    try:
        with path.open("wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise HTTPException(
                        status_code=400,
                        detail=f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB",
                    )
                await run_in_threadpool(out.write, chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    return path
