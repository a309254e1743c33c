"""Secret Server REST client (resource accessor)."""
import logging
from typing import Optional, Protocol

import requests

from .config_loader import load_config
from .errors import TransportError

logger = logging.getLogger(__name__)

CLOUD_BASE_URL_TEMPLATE = "https://{tenant}.secretservercloud.{tld}/"
ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH"})


class ResourceAccessor(Protocol):
    """Anything that can perform a request against a Secret Server resource."""

    def access_resource(self, method: str, resource: str, path: str,
                        body: Optional[bytes] = None) -> bytes:
        ...


class SecretServerClient:
    """Thin wrapper around a requests session bound to one Secret Server."""

    def __init__(self, token: str, server_url: Optional[str] = None,
                 tenant: Optional[str] = None, tld: str = "com",
                 api_path: str = "/api/v1", timeout: float = 30.0):
        if not server_url and not tenant:
            raise ValueError("Either server_url or tenant is required")
        self.token = token
        self.server_url = server_url
        self.tenant = tenant
        self.tld = tld
        self.api_path = api_path
        self.timeout = timeout
        self._session = None

    @classmethod
    def from_config(cls) -> "SecretServerClient":
        """
        Build a client from the user's config file.

        Raises:
            FileNotFoundError: If no config file can be located
            ConfigError: If the config file is invalid
        """
        config = load_config()
        server = config["server"]
        return cls(
            token=config["authentication"]["token"],
            server_url=server.get("url"),
            tenant=server.get("tenant"),
            tld=server["tld"],
            api_path=server["api_path"],
            timeout=server["timeout"],
        )

    @property
    def session(self) -> requests.Session:
        """Lazy-initialize session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
            })
        return self._session

    @property
    def base_url(self) -> str:
        if self.server_url:
            return self.server_url
        return CLOUD_BASE_URL_TEMPLATE.format(tenant=self.tenant, tld=self.tld)

    def url_for(self, resource: str, path: str = "") -> str:
        """Compose the request URL for a path below a resource."""
        return "/".join(
            segment.strip("/")
            for segment in (self.base_url, self.api_path, resource, path)
        )

    def access_resource(self, method: str, resource: str, path: str,
                        body: Optional[bytes] = None) -> bytes:
        """
        Perform an HTTP request against a resource.

        Args:
            method: HTTP verb
            resource: Resource name, e.g. "secrets"
            path: Path below the resource; may be a query string starting with "?"
            body: Optional request body

        Returns:
            Raw response body

        Raises:
            TransportError: On an invalid method, a network failure or a non-2xx status
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise TransportError(f"invalid method {method}")

        url = self.url_for(resource, path)
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(method, url, data=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url}: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.debug(f"{method} {url} returned {response.status_code}")
            raise TransportError(
                f"{response.status_code} {response.reason}: {response.text}",
                status_code=response.status_code,
            )

        return response.content
