"""Runtime package requirement lines for the generated README.

With ``[versions] resolve = true`` the latest release of each package is
read from the package index's JSON API.  Otherwise the configured fallback
specifiers are used and no network call is made.
"""

from __future__ import annotations

import logging

import httpx

from grpcwiz.config.models import VersionsConfig
from grpcwiz.domain.errors import ErrorCode, GenerationError

logger = logging.getLogger(__name__)


def fallback_requirements(config: VersionsConfig) -> list[str]:
    return [f"{package}{config.fallback.get(package, '')}" for package in config.packages]


def _latest_version(client: httpx.Client, index_url: str, package: str) -> str:
    response = client.get(f"{index_url.rstrip('/')}/{package}/json")
    response.raise_for_status()
    data = response.json()
    version = data.get("info", {}).get("version")
    if not version:
        msg = f"No version in index response for {package}"
        raise ValueError(msg)
    return str(version)


def resolve_requirements(
    config: VersionsConfig,
    *,
    client: httpx.Client | None = None,
) -> list[str]:
    """Return one pinned requirement line per configured package.

    Raises:
        GenerationError: ``VERSION_LOOKUP_FAILED`` when any lookup fails.
    """
    if not config.resolve:
        return fallback_requirements(config)

    owns_client = client is None
    http = client or httpx.Client(timeout=config.timeout)
    lines: list[str] = []
    try:
        for package in config.packages:
            try:
                version = _latest_version(http, config.index_url, package)
            except (httpx.HTTPError, ValueError) as exc:
                raise GenerationError(
                    ErrorCode.VERSION_LOOKUP_FAILED,
                    f"Cannot resolve the latest version of {package}: {exc}",
                    package=package,
                ) from exc
            logger.debug("Resolved %s==%s", package, version)
            lines.append(f"{package}=={version}")
    finally:
        if owns_client:
            http.close()
    return lines
