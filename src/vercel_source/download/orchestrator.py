"""
Download Pipeline Orchestrator

This module wires identifier resolution, tree fetching and materialization
into one run against a single API client session.
"""

import time
from typing import Optional

from vercel_source.config import Settings
from vercel_source.log_utils import logger

from .async_client import AsyncVercelClient, create_async_client
from .interfaces import MaterializeSummary, Pathish
from .materializer import Materializer
from .resolver import resolve_deployment_id
from .tree import fetch_source_entries


class DownloadOrchestrator:
    """
    Runs the source download pipeline for one deployment.

    This class coordinates:
    - Resolving the user-supplied identifier
    - Fetching and flattening the `src` tree
    - Materializing entries and reporting the outcome
    """

    def __init__(self, client: AsyncVercelClient, max_concurrent: Optional[int] = None):
        self.client = client
        self.max_concurrent = max_concurrent
        self.deployment_id: Optional[str] = None

    async def run(self, target: str, destination: Pathish) -> MaterializeSummary:
        """
        Download the source of `target` into `destination`.

        Resolution and listing errors propagate and end the run; per-file
        failures are collected in the returned summary.
        """
        start_time = time.time()

        self.deployment_id = await resolve_deployment_id(self.client, target)

        logger.info("Loading source files tree")
        entries = await fetch_source_entries(self.client, self.deployment_id)

        materializer = Materializer(
            self.client,
            self.deployment_id,
            destination,
            max_concurrent=self.max_concurrent,
        )
        summary = await materializer.materialize(entries)

        self._log_download_summary(summary, start_time)
        return summary

    def _log_download_summary(self, summary: MaterializeSummary, start_time: float) -> None:
        elapsed_time = time.time() - start_time
        logger.debug(f"Time taken: {elapsed_time:.2f} seconds")
        logger.info(
            "Entries: %d downloaded, %d directories created, %d skipped, %d failed",
            summary.downloaded,
            summary.created_directories,
            summary.skipped,
            len(summary.failed),
        )
        if summary.failed:
            logger.warning(f"{len(summary.failed)} entries failed - see list below")


async def download_source(
    settings: Settings, target: str, destination: Pathish
) -> MaterializeSummary:
    """
    Run a complete download with a client built from `settings`.

    Parameters:
        settings (Settings): Run configuration.
        target (str): Deployment URL or id as given by the user.
        destination (Pathish): Local directory that receives the `src` contents.

    Returns:
        MaterializeSummary: Counts and per-entry outcomes.
    """
    async with create_async_client(settings) as client:
        orchestrator = DownloadOrchestrator(client, settings.max_concurrent)
        return await orchestrator.run(target, destination)
