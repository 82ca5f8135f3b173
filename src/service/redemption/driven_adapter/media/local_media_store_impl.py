import re
from pathlib import Path
from typing import Optional

import anyio

from src.platform.constant.path import MEDIA_DIR
from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.interface.i_media_store import IMediaStore


_UNSAFE_NAME_CHARS = re.compile(r'[^A-Za-z0-9._-]')


class LocalMediaStoreImpl(IMediaStore):
    """Writes evidence photos to a local directory; the reference is the path below it."""

    def __init__(self, *, base_dir: Optional[str] = None) -> None:
        self.base_dir = Path(base_dir) if base_dir else MEDIA_DIR

    @Logger.io
    async def save(self, *, payload: bytes, name_hint: str) -> str:
        file_name = _UNSAFE_NAME_CHARS.sub('_', name_hint)
        target = anyio.Path(self.base_dir) / 'check-in' / file_name
        await target.parent.mkdir(parents=True, exist_ok=True)
        await target.write_bytes(payload)
        Logger.base.info(f'📷 [MEDIA] Stored {len(payload)} bytes as {file_name}')
        return f'check-in/{file_name}'

    @Logger.io
    async def delete(self, *, ref: str) -> None:
        target = anyio.Path(self.base_dir) / ref
        await target.unlink(missing_ok=True)
        Logger.base.info(f'📷 [MEDIA] Removed {ref}')
