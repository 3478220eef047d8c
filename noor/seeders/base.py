"""
Shared HTTP plumbing for the seeding jobs

Seeding runs out of band, so it uses a blocking requests.Session with a
generous timeout and a fixed number of retries per request.
"""

import logging
import time
from typing import Any, Dict, Optional

import requests

from ..config import SeedConfig, seed_config
from ..exceptions import SeedingError

logger = logging.getLogger(__name__)

HEADERS = {
    'User-Agent': 'noor-api-seeder/1.0',
    'Accept': 'application/json',
}


class SeedingClient:
    """GET JSON with bounded retries; exhausting them raises SeedingError."""

    def __init__(self, config: Optional[SeedConfig] = None, session: Optional[requests.Session] = None,
                 sleep=time.sleep):
        self.config = config or seed_config
        self.session = session or requests.Session()
        self._sleep = sleep

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None, label: Optional[str] = None) -> Any:
        label = label or url
        attempts = max(1, self.config.max_retries)

        for attempt in range(1, attempts + 1):
            try:
                response = self.session.get(
                    url, params=params, headers=HEADERS, timeout=self.config.request_timeout
                )
                response.raise_for_status()
                return response.json()
            except (requests.RequestException, ValueError) as e:
                if attempt == attempts:
                    logger.error(f"Failed to fetch {label} after {attempts} attempts: {e}")
                    raise SeedingError(f"Failed to fetch {label}: {e}") from e
                logger.warning(
                    f"Failed to fetch {label}, retrying in {self.config.retry_delay}s "
                    f"({attempts - attempt} attempts left): {e}"
                )
                self._sleep(self.config.retry_delay)

    def close(self) -> None:
        self.session.close()
