import logging
import os
import uuid
from pathlib import Path
from typing import Annotated, Optional

from fastapi import Depends, UploadFile
from starlette.concurrency import run_in_threadpool

from .config import settings

logger = logging.getLogger(__name__)


class FileStore:
    """
    Stores uploaded images in a local directory that is served under /images.
    The value persisted on rows is the generated file name.
    """

    def __init__(self, root: str | Path = settings.STATIC_DIR):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    async def store(self, upload: UploadFile) -> str:
        ext = os.path.splitext(upload.filename or "")[1].lower()
        name = f"{uuid.uuid4()}{ext}"
        content = await upload.read()
        await run_in_threadpool((self.root / name).write_bytes, content)
        logger.info(f"Stored file {name} ({len(content)} bytes)")
        return name

    async def remove(self, name: Optional[str]) -> None:
        """Best effort: a missing or undeletable file is logged and skipped."""
        if not name:
            return
        path = self.root / Path(name).name
        try:
            await run_in_threadpool(path.unlink, True)
        except OSError as e:
            logger.warning(f"Could not remove file {path}: {e}")


_file_store: Optional[FileStore] = None


def get_file_store() -> FileStore:
    global _file_store
    if _file_store is None:
        _file_store = FileStore()
    return _file_store


FileStoreDep = Annotated[FileStore, Depends(get_file_store)]
