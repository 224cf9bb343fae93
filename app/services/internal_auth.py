from __future__ import annotations

import ipaddress
import secrets
from functools import lru_cache

import structlog
from fastapi import Request

from app.core.config import get_settings

INTERNAL_TOKEN_HEADER = "X-Internal-Token"

logger = structlog.get_logger(__name__)


class InternalAccessDeniedError(Exception):
    pass


def is_valid_internal_token(*, expected_token: str, received_token: str | None) -> bool:
    if not expected_token or not received_token:
        return False
    return secrets.compare_digest(expected_token, received_token)


@lru_cache(maxsize=32)
def _parse_allowlist(
    allowlist: str,
) -> tuple[ipaddress.IPv4Network | ipaddress.IPv6Network, ...]:
    networks: list[ipaddress.IPv4Network | ipaddress.IPv6Network] = []
    for raw_entry in allowlist.split(","):
        entry = raw_entry.strip()
        if not entry:
            continue
        try:
            networks.append(ipaddress.ip_network(entry, strict=False))
        except ValueError:
            continue
    return tuple(networks)


def extract_client_ip(request: Request) -> str | None:
    if request.client is None:
        return None
    try:
        return str(ipaddress.ip_address(request.client.host.strip()))
    except ValueError:
        return None


def is_client_ip_allowed(*, client_ip: str | None, allowlist: str) -> bool:
    if client_ip is None:
        return False
    try:
        parsed_ip = ipaddress.ip_address(client_ip)
    except ValueError:
        return False
    return any(parsed_ip in network for network in _parse_allowlist(allowlist))


def assert_internal_access(request: Request) -> None:
    settings = get_settings()
    client_ip = extract_client_ip(request)
    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise InternalAccessDeniedError

    if not is_valid_internal_token(
        expected_token=settings.internal_api_token,
        received_token=request.headers.get(INTERNAL_TOKEN_HEADER),
    ):
        logger.warning("internal_auth_failed", reason="invalid_credentials", client_ip=client_ip)
        raise InternalAccessDeniedError
