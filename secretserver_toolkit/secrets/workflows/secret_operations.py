"""Workflow for secret retrieval and name resolution."""
import json
import logging
from dataclasses import dataclass
from typing import Any, List
from urllib.parse import urlencode

from ..domains.errors import DecodeError, MultipleSecretsFoundError, SecretServerError, TransportError
from ..domains.models import Secret, wire_object, wire_value
from ..domains.server_client import ResourceAccessor

logger = logging.getLogger(__name__)

# URL path component for the secrets resource
RESOURCE = "secrets"


@dataclass
class _SearchRecord:
    id: int
    name: str
    secret_template_id: int
    secret_template_name: str

    @classmethod
    def from_dict(cls, data: Any) -> "_SearchRecord":
        data = wire_object(data, "search record")
        return cls(
            id=wire_value(data, "ID", int, 0),
            name=wire_value(data, "Name", str, ""),
            secret_template_id=wire_value(data, "SecretTemplateID", int, 0),
            secret_template_name=wire_value(data, "SecretTemplateName", str, ""),
        )


def _parse_search_records(data: bytes) -> List[_SearchRecord]:
    body = wire_object(json.loads(data), "search response")
    return [_SearchRecord.from_dict(record) for record in wire_value(body, "Records", list, [])]


def fetch_secret(accessor: ResourceAccessor, secret_id: int) -> Secret:
    """
    Fetch a secret by ID, downloading any file attachments.

    Fields with a file attachment come back from the server with a dummy
    ItemValue; each one is replaced with the attachment content so callers
    never see the placeholder.

    Args:
        accessor: Resource accessor bound to a Secret Server
        secret_id: Numeric secret ID

    Returns:
        The secret with every attachment resolved

    Raises:
        TransportError: If the secret or any attachment cannot be fetched
        DecodeError: If the secret response cannot be parsed
    """
    logger.debug(f"Fetching secret {secret_id}")
    data = accessor.access_resource("GET", RESOURCE, str(secret_id))

    try:
        secret = Secret.from_dict(json.loads(data))
    except (ValueError, RecursionError, DecodeError) as e:
        raise DecodeError(f"parsing response from /{RESOURCE}/{secret_id}: {e}") from e

    for secret_field in secret.fields:
        if not secret_field.has_attachment:
            continue
        logger.debug(f"Downloading attachment for field '{secret_field.slug}' of secret {secret_id}")
        path = f"{secret_id}/fields/{secret_field.slug}"
        content = accessor.access_resource("GET", RESOURCE, path)
        secret_field.item_value = content.decode("utf-8", errors="replace")

    return secret


def resolve_secret_id(accessor: ResourceAccessor, name: str) -> int:
    """
    Resolve a secret name to its ID.

    The server performs the name match; this only disambiguates the result.

    Args:
        accessor: Resource accessor bound to a Secret Server
        name: Secret name to search for

    Returns:
        ID of the single matching secret

    Raises:
        MultipleSecretsFoundError: If more than one secret matches
        SecretServerError: If no secret matches
        TransportError: If the search request fails
        DecodeError: If the search response cannot be parsed
    """
    query = urlencode(sorted({
        "filter.searchFieldSlug": "name",
        "filter.searchText": name,
        "filter.doNotCalculateTotal": "true",
    }.items()))

    try:
        data = accessor.access_resource("GET", RESOURCE, "?" + query)
    except Exception as e:
        # Accessors other than SecretServerClient may raise anything
        raise TransportError(
            f"accessing resource {RESOURCE}: {e}",
            status_code=getattr(e, "status_code", None),
        ) from e

    try:
        records = _parse_search_records(data)
    except (ValueError, RecursionError, DecodeError) as e:
        raise DecodeError(f"parsing search response from /{RESOURCE}: {e}") from e

    if len(records) > 1:
        ids = [record.id for record in records]
        logger.debug(f"Name '{name}' matched secrets {ids}")
        raise MultipleSecretsFoundError(ids, name)
    if not records:
        raise SecretServerError(f"no secrets found with name '{name}'")

    return records[0].id


def fetch_secret_by_name(accessor: ResourceAccessor, name: str) -> Secret:
    """Resolve a secret name to its ID and fetch that secret."""
    return fetch_secret(accessor, resolve_secret_id(accessor, name))
