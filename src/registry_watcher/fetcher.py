"""Registry snapshot fetching over HTTP."""

import logging
from typing import Callable, Optional

import requests

from .errors import FetchError
from .snapshot import Snapshot
from .utils import current_millis

logger = logging.getLogger(__name__)


class SnapshotFetcher:
    """
    Retrieves the current registry snapshot with a single HTTP GET.

    There are no retries: one failed attempt is reported to the caller as
    a ``FetchError``.
    """

    def __init__(
        self,
        host: str,
        port: int,
        connect_timeout: int,
        read_timeout: int,
        path: str = "/registry/list",
        session: Optional[requests.Session] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Args:
            host: Registry host name or address
            port: Registry port
            connect_timeout: Connect timeout in milliseconds
            read_timeout: Read timeout in milliseconds
            path: Resource path serving the registry snapshot
            session: HTTP session to use (a new one by default)
            clock: Millisecond clock used to stamp snapshots

        Raises:
            FetchError: If the address is unusable
        """
        if not host:
            raise FetchError("Registry host is not configured")
        if not 0 < port < 65536:
            raise FetchError(f"Invalid registry port: {port}")

        self.host = host
        self.port = port
        self.url = f"http://{host}:{port}{path}"
        self.timeout = (connect_timeout / 1000, read_timeout / 1000)
        self.session = session or requests.Session()
        self.clock = clock or current_millis

    @property
    def server_address(self) -> str:
        return f"{self.host}:{self.port}"

    def fetch(self) -> Snapshot:
        """
        Fetch the registry's current state.

        Returns:
            Snapshot stamped with the fetch time

        Raises:
            FetchError: On timeout, connection failure, HTTP error status, or
                an empty response body
        """
        logger.debug("Fetching registry snapshot from %s", self.url)
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.ConnectTimeout as e:
            raise FetchError(f"Timed out connecting to registry at {self.server_address}") from e
        except requests.exceptions.ReadTimeout as e:
            raise FetchError(f"Timed out reading from registry at {self.server_address}") from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "error"
            raise FetchError(f"Registry at {self.server_address} returned HTTP {status}") from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Can not reach registry at {self.server_address}: {e}") from e

        payload = response.text
        if not payload or not payload.strip():
            raise FetchError(f"Registry at {self.server_address} returned no data")

        snapshot = Snapshot.capture(payload, clock=self.clock)
        logger.debug("Fetched %d characters at %s", len(payload), snapshot.captured_at)
        return snapshot
