"""
Filesystem materialization of a flattened deployment tree.

Entries are walked in flattened order. Directories are created inline, so a
directory always exists before any download below it is scheduled; file
downloads are started as tasks right away and run concurrently, bounded by a
semaphore. Paths that already exist are skipped, which makes repeated runs
against the same destination pick up only what is missing.
"""

import asyncio
from pathlib import Path
from typing import Iterable, List, Optional, Union

import aiofiles.os

from vercel_source.constants import (
    ERROR_TYPE_FILESYSTEM,
    ERROR_TYPE_HTTP,
    ERROR_TYPE_NETWORK,
    ERROR_TYPE_PAYLOAD,
    ERROR_TYPE_UNKNOWN,
    ERROR_TYPE_VALIDATION,
    SOURCE_ROOT_NAME,
)
from vercel_source.exceptions import (
    APIError,
    FileSystemError,
    PathValidationError,
    TransportError,
)
from vercel_source.log_utils import logger

from .async_client import AsyncVercelClient
from .files import download_file, safe_relative_parts
from .interfaces import DownloadResult, FlatEntry, MaterializeSummary, Pathish


def _classify_error(error: BaseException) -> str:
    if isinstance(error, TransportError):
        return ERROR_TYPE_HTTP if error.status_code is not None else ERROR_TYPE_NETWORK
    if isinstance(error, PathValidationError):
        return ERROR_TYPE_VALIDATION
    if isinstance(error, (FileSystemError, OSError)):
        return ERROR_TYPE_FILESYSTEM
    if isinstance(error, APIError):
        return ERROR_TYPE_PAYLOAD
    return ERROR_TYPE_UNKNOWN


def _failure(
    entry: FlatEntry, target: Optional[Path], error: BaseException
) -> DownloadResult:
    return DownloadResult(
        success=False,
        entry_name=entry.name,
        file_path=target,
        entry_type=entry.type,
        error_message=str(error),
        error_type=_classify_error(error),
        http_status_code=getattr(error, "status_code", None),
    )


class Materializer:
    """
    Recreates flattened deployment entries under a local destination directory.

    Usage:
        materializer = Materializer(client, deployment_id, "out")
        summary = await materializer.materialize(entries)
    """

    def __init__(
        self,
        client: AsyncVercelClient,
        deployment_id: str,
        destination: Pathish,
        max_concurrent: Optional[int] = None,
        root_name: str = SOURCE_ROOT_NAME,
    ) -> None:
        """
        Parameters:
            client (AsyncVercelClient): API client used for file downloads.
            deployment_id (str): Deployment the entries belong to.
            destination (Pathish): Local directory replacing the `src` root.
            max_concurrent (Optional[int]): Download limit; defaults to the client's settings.
            root_name (str): Leading path segment of every entry name.
        """
        self.client = client
        self.deployment_id = deployment_id
        self.destination = Path(destination)
        self.root_name = root_name
        self.max_concurrent = max(
            1, max_concurrent or client.settings.max_concurrent
        )
        self._semaphore = asyncio.Semaphore(self.max_concurrent)

    def destination_for(self, entry: FlatEntry) -> Path:
        """
        Map an entry name onto the destination directory ("src/pkg/b.txt" -> destination/pkg/b.txt).

        Raises:
            PathValidationError: If the entry name is not a safe path below the root.
        """
        return self.destination.joinpath(
            *safe_relative_parts(entry.name, self.root_name)
        )

    async def _ensure_destination(self) -> None:
        try:
            await aiofiles.os.makedirs(self.destination, exist_ok=True)
        except OSError as e:
            raise FileSystemError(
                f"Failed to create destination directory {self.destination}",
                path=str(self.destination),
                details=str(e),
            ) from e

    async def _create_directory(self, entry: FlatEntry, target: Path) -> DownloadResult:
        try:
            await aiofiles.os.mkdir(target)
        except OSError as e:
            logger.error(f"Failed to create directory {target}: {e}")
            return _failure(entry, target, e)
        logger.debug(f"Created directory {target}")
        return DownloadResult(
            success=True, entry_name=entry.name, file_path=target, entry_type=entry.type
        )

    async def _download(self, entry: FlatEntry, target: Path) -> DownloadResult:
        """Download one file; every failure is captured in the returned result."""
        async with self._semaphore:
            try:
                if not entry.uid:
                    raise APIError(f"File entry {entry.name} has no content id")
                size = await download_file(
                    self.client, self.deployment_id, entry.uid, target
                )
            except (APIError, FileSystemError) as e:
                logger.error(f"Failed to download {entry.name}: {e}")
                return _failure(entry, target, e)
            except Exception as e:
                logger.exception(f"Unexpected error downloading {entry.name}: {e}")
                return _failure(entry, target, e)

        return DownloadResult(
            success=True,
            entry_name=entry.name,
            file_path=target,
            entry_type=entry.type,
            bytes_written=size,
        )

    async def materialize(self, entries: Iterable[FlatEntry]) -> MaterializeSummary:
        """
        Realize flattened entries on disk and wait for every download to settle.

        Parameters:
            entries (Iterable[FlatEntry]): Entries in parent-before-children order.

        Returns:
            MaterializeSummary: Tree-wide file and directory counts plus one result per entry.

        Raises:
            FileSystemError: If the destination directory cannot be created.
        """
        entries = list(entries)
        summary = MaterializeSummary(
            file_count=sum(1 for e in entries if e.is_file),
            directory_count=sum(1 for e in entries if e.is_directory),
        )

        await self._ensure_destination()

        slots: List[Union[DownloadResult, "asyncio.Task[DownloadResult]"]] = []
        for entry in entries:
            if not (entry.is_file or entry.is_directory):
                logger.debug(f"Ignoring {entry.type} entry {entry.name}")
                continue

            try:
                target = self.destination_for(entry)
            except PathValidationError as e:
                logger.error(str(e))
                slots.append(_failure(entry, None, e))
                continue

            if await aiofiles.os.path.exists(target):
                logger.debug(f"Skipping existing {target}")
                slots.append(
                    DownloadResult(
                        success=True,
                        entry_name=entry.name,
                        file_path=target,
                        entry_type=entry.type,
                        was_skipped=True,
                    )
                )
                continue

            if entry.is_directory:
                slots.append(await self._create_directory(entry, target))
            else:
                slots.append(asyncio.create_task(self._download(entry, target)))

        tasks = [slot for slot in slots if isinstance(slot, asyncio.Task)]
        if tasks:
            await asyncio.gather(*tasks)

        summary.results = [
            slot.result() if isinstance(slot, asyncio.Task) else slot
            for slot in slots
        ]
        return summary
