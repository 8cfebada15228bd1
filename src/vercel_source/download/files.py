"""
File content download and local path handling.

The file content endpoint returns JSON whose `data` field holds the file's
bytes in base64. Remote entry names are validated segment by segment before
they are mapped under the destination directory.
"""

import base64
import binascii
import os
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from vercel_source.constants import DEPLOYMENT_FILE_CONTENT_PATH, SOURCE_ROOT_NAME
from vercel_source.exceptions import APIError, PathValidationError, WriteError
from vercel_source.log_utils import logger

from .async_client import AsyncVercelClient
from .interfaces import Pathish


def _sanitize_path_component(component: Optional[str]) -> Optional[str]:
    """
    Validate a single filesystem path component.

    Returns the component unchanged if it is a safe, relative path segment, or
    None when it is empty, "." or "..", absolute, contains a null byte, or
    contains a path separator.
    """
    if component is None:
        return None

    if not component.strip() or component in {".", ".."}:
        return None

    if os.path.isabs(component):
        return None

    if "\x00" in component:
        return None

    for separator in (os.sep, os.altsep, "/"):
        if separator and separator in component:
            return None

    return component


def safe_relative_parts(name: str, root: str = SOURCE_ROOT_NAME) -> Tuple[str, ...]:
    """
    Split a flattened entry name into path segments below the flattening root.

    Parameters:
        name (str): Slash-separated entry path such as "src/pkg/b.txt".
        root (str): Leading segment to strip.

    Returns:
        Tuple[str, ...]: Validated segments after the root, e.g. ("pkg", "b.txt").

    Raises:
        PathValidationError: If the name does not start with the root or any segment is unsafe.
    """
    head, sep, remainder = name.partition("/")
    if head != root or not sep:
        raise PathValidationError(
            f"Entry {name!r} is not under '{root}'", path=name
        )

    parts = remainder.split("/")
    for part in parts:
        if _sanitize_path_component(part) is None:
            raise PathValidationError(
                f"Unsafe path segment {part!r} in entry {name!r}", path=name
            )
    return tuple(parts)


def decode_file_payload(payload: object, endpoint: Optional[str] = None) -> bytes:
    """
    Decode the base64 `data` field of a file content response.

    Raises:
        APIError: If `data` is missing, not a string, or not valid base64.
    """
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, str):
        raise APIError("File content response has no 'data' field", endpoint=endpoint)
    try:
        return base64.b64decode(data, validate=False)
    except (binascii.Error, ValueError) as e:
        raise APIError(
            "File content is not valid base64", endpoint=endpoint, details=str(e)
        ) from e


async def write_file(destination: Pathish, content: bytes) -> None:
    """
    Write bytes to `destination`, creating or truncating it.

    Raises:
        WriteError: If the file cannot be written.
    """
    try:
        async with aiofiles.open(destination, "wb") as f:
            await f.write(content)
    except OSError as e:
        raise WriteError(
            f"Failed to write {destination}", path=str(destination), details=str(e)
        ) from e


async def download_file(
    client: AsyncVercelClient,
    deployment_id: str,
    file_id: str,
    destination: Pathish,
) -> int:
    """
    Fetch one file's content from the deployment and write it to `destination`.

    Parameters:
        client (AsyncVercelClient): API client.
        deployment_id (str): Deployment the file belongs to.
        file_id (str): Content identifier (`uid`) of the file.
        destination (Pathish): Local path to write.

    Returns:
        int: Number of bytes written.

    Raises:
        TransportError: If the request fails; no retry is attempted.
        APIError: If the response payload cannot be decoded.
        WriteError: If the local write fails.
    """
    path = client.build_path(
        DEPLOYMENT_FILE_CONTENT_PATH, deployment_id=deployment_id, file_id=file_id
    )
    payload = await client.get_json(path)
    content = decode_file_payload(payload, endpoint=path)
    await write_file(destination, content)
    logger.info(f"Downloaded: {Path(destination)} ({len(content)} bytes)")
    return len(content)
