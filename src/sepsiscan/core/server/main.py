"""SepsiScan server entry point: ``python -m sepsiscan.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from sepsiscan.core.config.settings import get_settings
from sepsiscan.core.server.app import create_app


def _is_loopback_host(host: str) -> bool:
    if host in {"localhost"}:
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def run() -> None:
    """Start the SepsiScan MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.sepsiscan_log_level.upper(), logging.INFO)
    )

    logger = logging.getLogger(__name__)
    if not settings.sepsiscan_allow_insecure_bind and not _is_loopback_host(
        settings.sepsiscan_host
    ):
        raise RuntimeError(
            "Refusing to bind SepsiScan to a non-loopback host without an auth layer. "
            "Set SEPSISCAN_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    logger.info(
        "Starting SepsiScan server on %s:%d",
        settings.sepsiscan_host,
        settings.sepsiscan_port,
    )

    mcp = create_app()
    mcp.run(
        transport="streamable-http",
        host=settings.sepsiscan_host,
        port=settings.sepsiscan_port,
    )


if __name__ == "__main__":
    run()
