"""
HTTP task source for fetching POAM snapshots from the task data API.
"""

import asyncio
import logging
from typing import List, Optional

import httpx

from poam_alerts.core.models import Task
from poam_alerts.sources.base import TaskSource, TaskSourceError, parse_tasks

logger = logging.getLogger(__name__)


class HttpTaskSource(TaskSource):
    """
    Fetches task snapshots over HTTP.

    Expects ``GET {base_url}/systems/{system_id}/poams`` to return a
    JSON list of POAMs with nested milestones.

    Usage:
        source = HttpTaskSource(base_url="http://localhost:1420/api")
        tasks = await source.fetch_tasks("default")
        await source.close()
    """

    def __init__(
        self,
        base_url: str = "http://localhost:1420/api",
        api_token: Optional[str] = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize HTTP task source.

        Args:
            base_url: Base URL of the task data API
            api_token: Optional bearer token
            timeout: HTTP request timeout in seconds
            max_retries: Number of attempts for transport errors
            client: Pre-configured async client (optional)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)

        headers = {"Accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"

        # Create async HTTP client (will be reused)
        self.client = client or httpx.AsyncClient(timeout=self.timeout, headers=headers)

    async def fetch_tasks(self, system_id: str) -> List[Task]:
        url = f"{self.base_url}/systems/{system_id}/poams"

        for attempt in range(self.max_retries):
            try:
                response = await self.client.get(url)
                response.raise_for_status()
                records = response.json()
                break

            except httpx.HTTPStatusError as e:
                # Server answered; retrying will not help
                raise TaskSourceError(
                    f"Task API returned {e.response.status_code} for system {system_id}"
                ) from e

            except (httpx.TransportError, ValueError) as e:
                if attempt == self.max_retries - 1:
                    raise TaskSourceError(
                        f"Failed to fetch tasks for system {system_id} after "
                        f"{self.max_retries} attempts: {e}"
                    ) from e
                logger.warning(
                    f"Task fetch attempt {attempt + 1}/{self.max_retries} failed: {e}"
                )
                await asyncio.sleep(0.5 * (2 ** attempt))

        if not isinstance(records, list):
            raise TaskSourceError(f"Expected a list of POAMs from {url}")

        tasks = parse_tasks(records, url)
        logger.debug(f"Fetched {len(tasks)} tasks for system {system_id}")
        return tasks

    async def close(self) -> None:
        await self.client.aclose()
