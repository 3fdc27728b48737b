"""Zerto Virtual Manager REST API client.

This module handles:
- Authentication with the ZVM session API (HTTP Basic Auth)
- Session token handling via the x-zerto-session header
- Fetching VPG records and averaging their ActualRPO values
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import requests
import urllib3

from zerto_rpo.config import Credentials, Settings
from zerto_rpo.errors import AuthError, QueryError

# Configure module logger
logger = logging.getLogger(__name__)

SESSION_HEADER = "x-zerto-session"


@dataclass(frozen=True)
class VPG:
    """A single VPG record as returned by /v1/vpgs.

    Only the fields the check needs are kept.

    Attributes:
        actual_rpo: Current RPO of the VPG in seconds
    """
    actual_rpo: int

    @classmethod
    def from_json(cls, item: object) -> "VPG":
        if item is None:
            return cls(actual_rpo=0)
        if not isinstance(item, dict):
            raise QueryError(f"Expected a VPG object, got {type(item).__name__}")

        # Missing or null for VPGs that have not synced yet
        value = item.get("ActualRPO")
        if value is None:
            return cls(actual_rpo=0)
        if isinstance(value, bool) or not isinstance(value, int):
            raise QueryError(f"ActualRPO must be an integer, got {value!r}")
        return cls(actual_rpo=value)


@dataclass(frozen=True)
class RPOSummary:
    """Average ActualRPO over a set of VPGs.

    Attributes:
        average: Integer mean of ActualRPO (0 when there are no VPGs)
        count: Number of VPGs the average was computed over
    """
    average: int
    count: int


def average_rpo(vpgs: List[VPG]) -> RPOSummary:
    """Compute the integer mean ActualRPO of a list of VPGs.

    Args:
        vpgs: VPG records

    Returns:
        RPOSummary; an empty list gives average 0 and count 0
    """
    if not vpgs:
        return RPOSummary(average=0, count=0)

    total = sum(vpg.actual_rpo for vpg in vpgs)
    return RPOSummary(average=total // len(vpgs), count=len(vpgs))


class ZertoClient:
    """Client for the Zerto Virtual Manager REST API.

    Logs in once with Basic Auth and attaches the returned session token
    to every later request. The client owns its requests.Session and can
    be used as a context manager to close it.

    Attributes:
        settings: Connection settings (server, port, timeout, TLS validation)
        credentials: ZVM login credentials
        token: Session token after a successful login, else None
    """

    LOGIN_PATH = "/v1/session/add"
    VPGS_PATH = "/v1/vpgs"

    def __init__(
        self,
        settings: Settings,
        credentials: Credentials,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            settings: Connection settings
            credentials: ZVM login credentials
            session: Optional session to use instead of a new requests.Session
        """
        self.settings = settings
        self.credentials = credentials
        self.session = session if session is not None else requests.Session()
        self.session.verify = settings.verify_tls
        self.token: Optional[str] = None

        if not settings.verify_tls:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            logger.warning(f"TLS certificate validation is disabled for {settings.server}")

        self.session.headers.update({
            "Accept": "application/json",
        })

    def __enter__(self) -> "ZertoClient":
        """Return the client itself for use in a with block."""
        return self

    def __exit__(self, *exc_info) -> None:
        """Close the underlying session when the with block exits."""
        self.close()

    def close(self) -> None:
        """Close the underlying requests session and its connections."""
        self.session.close()

    def _url(self, path: str) -> str:
        """Build an absolute API URL.

        Args:
            path: API path starting with a slash, e.g. /v1/vpgs

        Returns:
            URL on the configured server and port
        """
        return f"{self.settings.base_url}{path}"

    def login(self) -> str:
        """Authenticate with the ZVM and obtain a session token.

        Sends POST /v1/session/add with Basic Auth and reads the token
        from the x-zerto-session response header.

        Returns:
            The session token

        Raises:
            AuthError: On transport failure, non-200 status or missing token
        """
        url = self._url(self.LOGIN_PATH)
        logger.info(f"Logging in to {self.settings.base_url} as {self.credentials.username}")

        try:
            response = self.session.post(
                url,
                auth=(self.credentials.username, self.credentials.password),
                timeout=self.settings.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(f"Login request failed: {e}") from e

        if response.status_code != 200:
            raise AuthError(f"Failed to login, status code: {response.status_code}")

        token = response.headers.get(SESSION_HEADER)
        if not token:
            raise AuthError("Session token not found in headers")

        self.token = token
        logger.info("Authentication successful")
        return token

    def query_vpgs(self) -> List[VPG]:
        """Fetch all VPG records.

        Returns:
            List of VPG records (may be empty)

        Raises:
            QueryError: If not logged in, or on transport, status or decode failure
        """
        if not self.token:
            raise QueryError("Not authenticated - call login() first")

        url = self._url(self.VPGS_PATH)
        logger.debug(f"Fetching VPGs from {url}")

        try:
            response = self.session.get(
                url,
                headers={SESSION_HEADER: self.token},
                timeout=self.settings.timeout,
            )
        except requests.RequestException as e:
            raise QueryError(f"VPG request failed: {e}") from e

        if not response.ok:
            raise QueryError(f"VPG query failed, status code: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise QueryError(f"Error decoding VPG response: {e}") from e

        # A null body decodes to no VPGs
        if payload is None:
            payload = []
        if not isinstance(payload, list):
            raise QueryError(f"Expected a JSON array of VPGs, got {type(payload).__name__}")

        vpgs = [VPG.from_json(item) for item in payload]
        logger.info(f"Fetched {len(vpgs)} VPGs")
        return vpgs

    def average_rpo(self) -> RPOSummary:
        """Fetch the VPGs and return their average ActualRPO.

        Raises:
            QueryError: If the VPG query fails
        """
        summary = average_rpo(self.query_vpgs())
        if summary.count == 0:
            logger.warning("No VPGs returned, reporting average RPO of 0")
        else:
            logger.info(f"Average RPO over {summary.count} VPGs: {summary.average}s")
        return summary
