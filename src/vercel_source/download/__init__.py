"""
vercel-source-downloader Download Subsystem

Core Components:
- async_client: aiohttp-based Vercel API client
- resolver: deployment identifier classification and lookup
- tree: file listing fetch and flattening
- files: single file download and path validation
- materializer: concurrent reconstruction of the tree on disk
- orchestrator: end-to-end pipeline
"""

from .async_client import AsyncVercelClient, create_async_client
from .interfaces import DownloadResult, FlatEntry, MaterializeSummary, TreeNode
from .materializer import Materializer
from .orchestrator import DownloadOrchestrator, download_source
from .resolver import IdentifierKind, classify_identifier, resolve_deployment_id
from .tree import fetch_source_entries, find_source_root, flatten_tree

__all__ = [
    # Interfaces
    "TreeNode",
    "FlatEntry",
    "DownloadResult",
    "MaterializeSummary",
    # Client
    "AsyncVercelClient",
    "create_async_client",
    # Pipeline stages
    "IdentifierKind",
    "classify_identifier",
    "resolve_deployment_id",
    "fetch_source_entries",
    "find_source_root",
    "flatten_tree",
    "Materializer",
    # Orchestration
    "DownloadOrchestrator",
    "download_source",
]
