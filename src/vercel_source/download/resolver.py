"""
Deployment identifier resolution.

A user may name a deployment three ways: a canonical `dpl_` identifier, the
raw identifier shown in the Vercel dashboard, or a deployment domain. Only
domains need an API round trip.
"""

import re
from enum import Enum

from vercel_source.constants import (
    CANONICAL_ID_PREFIX,
    DEPLOYMENT_BY_DOMAIN_PATH,
    HINT_DOMAIN_NOT_FOUND,
    MSG_RAW_ID_WARNING,
    RAW_ID_PATTERN,
)
from vercel_source.exceptions import APIError, InputError, NotFound, TransportError
from vercel_source.log_utils import logger

from .async_client import AsyncVercelClient

_RAW_ID_RX = re.compile(RAW_ID_PATTERN)


class IdentifierKind(Enum):
    CANONICAL = "canonical"
    RAW = "raw"
    DOMAIN = "domain"


def classify_identifier(value: str) -> IdentifierKind:
    """
    Decide which kind of deployment identifier a string is.

    Long purely alphanumeric strings are treated as dashboard ids, so a domain
    label of 24+ alphanumeric characters without dots would be misread; any
    real domain contains a dot and is therefore unaffected.
    """
    if value.startswith(CANONICAL_ID_PREFIX):
        return IdentifierKind.CANONICAL
    if _RAW_ID_RX.fullmatch(value):
        return IdentifierKind.RAW
    return IdentifierKind.DOMAIN


async def get_deployment_id(client: AsyncVercelClient, domain: str) -> str:
    """
    Look up the canonical deployment id for a domain.

    Raises:
        NotFound: If the API has no deployment for the domain.
        APIError: If the response lacks a string `id`.
        TransportError: For any other request failure.
    """
    path = client.build_path(DEPLOYMENT_BY_DOMAIN_PATH, team_scoped=False, domain=domain)
    try:
        deployment = await client.get_json(path)
    except TransportError as e:
        if e.is_not_found:
            raise NotFound(
                f"Deployment not found: {domain}",
                hint=HINT_DOMAIN_NOT_FOUND,
                endpoint=path,
            ) from e
        raise

    deployment_id = deployment.get("id") if isinstance(deployment, dict) else None
    if not isinstance(deployment_id, str) or not deployment_id:
        raise APIError(
            f"Deployment lookup for {domain} returned no id", endpoint=path
        )
    return deployment_id


async def resolve_deployment_id(client: AsyncVercelClient, value: str) -> str:
    """
    Turn a user-supplied deployment URL or id into an id usable for file listing.

    Parameters:
        client (AsyncVercelClient): API client, used only for domains.
        value (str): Domain, dashboard id or `dpl_` id.

    Returns:
        str: The deployment identifier.
    """
    value = value.strip()
    if not value:
        raise InputError("Missing deployment URL or id")

    kind = classify_identifier(value)
    if kind is IdentifierKind.CANONICAL:
        return value
    if kind is IdentifierKind.RAW:
        logger.warning(MSG_RAW_ID_WARNING)
        return value

    logger.info(f"Getting deployment id for {value}")
    deployment_id = await get_deployment_id(client, value)
    logger.debug(f"Resolved {value} to {deployment_id}")
    return deployment_id
