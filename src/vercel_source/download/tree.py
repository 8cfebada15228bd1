"""
Deployment file tree fetching and flattening.

The Vercel API returns a deployment's files as a nested tree. Only the
top-level `src` directory holds the uploaded source; it is flattened into a
parent-before-children sequence of FlatEntry objects so that directories can
be created before anything inside them is written.
"""

from typing import Iterator, List, Optional, Sequence

from vercel_source.constants import (
    DEPLOYMENT_FILES_PATH,
    HINT_DEPLOYMENT_NOT_FOUND,
    SOURCE_ROOT_NAME,
)
from vercel_source.exceptions import (
    APIError,
    DeploymentNotFound,
    SourceNotFound,
    TransportError,
)
from vercel_source.log_utils import logger

from .async_client import AsyncVercelClient
from .interfaces import FlatEntry, TreeNode


def find_source_root(nodes: Sequence[TreeNode]) -> TreeNode:
    """
    Return the top-level `src` directory of a deployment listing.

    Raises:
        SourceNotFound: If no top-level directory is named exactly `src`.
    """
    for node in nodes:
        if node.name == SOURCE_ROOT_NAME and node.is_directory:
            return node
    raise SourceNotFound(
        f"No '{SOURCE_ROOT_NAME}' directory found in deployment.",
        details="Make sure the deployment has source files.",
    )


def flatten_tree(root: TreeNode, prefix: Optional[str] = None) -> Iterator[FlatEntry]:
    """
    Yield every descendant of `root` as a FlatEntry, depth first.

    Each child is yielded with its name rewritten to "{parent path}/{child name}"
    and is followed by its own descendants, so a directory always precedes
    its contents. Siblings keep the order the API returned them in. The root
    itself is not yielded.
    """
    base = root.name if prefix is None else prefix
    for child in root.children:
        path = f"{base}/{child.name}"
        yield FlatEntry(name=path, type=child.type, uid=child.uid)
        if child.children:
            yield from flatten_tree(child, path)


async def fetch_source_entries(
    client: AsyncVercelClient, deployment_id: str
) -> List[FlatEntry]:
    """
    Fetch a deployment's file tree and flatten its `src` directory.

    Raises:
        DeploymentNotFound: If the listing request returns 404.
        SourceNotFound: If the listing has no `src` directory.
        APIError: If the listing payload is malformed.
        TransportError: For any other request failure.
    """
    path = client.build_path(DEPLOYMENT_FILES_PATH, deployment_id=deployment_id)
    try:
        payload = await client.get_json(path)
    except TransportError as e:
        if e.is_not_found:
            raise DeploymentNotFound(
                f"Deployment not found with ID: {deployment_id}",
                hint=HINT_DEPLOYMENT_NOT_FOUND,
                endpoint=path,
            ) from e
        raise

    if not isinstance(payload, list):
        raise APIError(
            f"Unexpected file listing payload: expected list, got {type(payload).__name__}",
            endpoint=path,
        )

    nodes = [TreeNode.from_dict(item) for item in payload]
    source = find_source_root(nodes)
    entries = list(flatten_tree(source))
    logger.debug(f"Flattened {len(entries)} entries under '{source.name}'")
    return entries
