"""
EC2 instance metadata client.

Talks to the link-local metadata service using IMDSv2 session tokens, and
falls back to plain IMDSv1 GETs when the token endpoint is unavailable.
"""

import logging

import requests

from .base import MetadataError, MetadataProvider

logger = logging.getLogger(__name__)

METADATA_URL = "http://169.254.169.254/latest"
TOKEN_TTL_SECONDS = 21600
DEFAULT_TIMEOUT_SECONDS = 3


class EC2MetadataProvider(MetadataProvider):
    """Instance metadata from the EC2 metadata service."""

    def __init__(
        self,
        base_url: str = METADATA_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._token = None

    def _get_token(self) -> str | None:
        """Fetch an IMDSv2 token, or None if the service only speaks IMDSv1."""
        if self._token is not None:
            return self._token

        try:
            response = self.session.put(
                f"{self.base_url}/api/token",
                headers={"X-aws-ec2-metadata-token-ttl-seconds": str(TOKEN_TTL_SECONDS)},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.debug(f"IMDSv2 token request failed, using IMDSv1: {e}")
            return None

        if response.status_code != 200:
            logger.debug(
                f"IMDSv2 token request returned {response.status_code}, using IMDSv1"
            )
            return None

        self._token = response.text
        return self._token

    def get_metadata(self, key: str) -> str:
        """Read a value from /latest/meta-data/<key>."""
        headers = {}
        token = self._get_token()
        if token:
            headers["X-aws-ec2-metadata-token"] = token

        url = f"{self.base_url}/meta-data/{key.lstrip('/')}"
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise MetadataError(
                str(e),
                provider="aws",
                operation=f"GetMetadata({key})",
                code=type(e).__name__,
                retryable=True,
            ) from e

        if response.status_code != 200:
            raise MetadataError(
                f"metadata service returned HTTP {response.status_code}",
                provider="aws",
                operation=f"GetMetadata({key})",
                code=str(response.status_code),
                details={"url": url},
            )

        value = response.text.strip()
        logger.debug(f"Metadata {key} = {value}")
        return value
