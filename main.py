"""CLI entry-point for running the bucket index server."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

import uvicorn

from bucket_index.core.config import Settings, load_settings
from bucket_index.main import create_app


def parse_address(address: str) -> tuple[Optional[str], Optional[int]]:
    """Split ``host:port``; an empty host (``:80``) keeps the default bind address."""
    host, sep, port = address.rpartition(":")
    if not sep:
        return address or None, None
    if not port.isdigit():
        raise ValueError(f"Invalid port in address {address!r}")
    return host or None, int(port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Serve an S3-compatible bucket as a browsable file server"
    )
    parser.add_argument("--address", help="Listen address as host:port (default :80)")
    parser.add_argument("--bucket", help="Bucket to expose")
    parser.add_argument("--endpoint", help="S3 endpoint, host:port or URL")
    parser.add_argument("--access-key", dest="access_key", help="Access key of the store")
    parser.add_argument("--secret-key", dest="secret_key", help="Secret key of the store")
    parser.add_argument("--region", help="Region used for request signing")
    parser.add_argument(
        "--secure",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use HTTPS for endpoints given without a scheme",
    )
    parser.add_argument("--log-level", dest="log_level", help="Root logging level")
    parser.add_argument("--config", type=Path, help="Optional JSON configuration file")
    return parser


def build_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    parser = build_parser()
    args = parser.parse_args(argv)

    host: Optional[str] = None
    port: Optional[int] = None
    if args.address:
        try:
            host, port = parse_address(args.address)
        except ValueError as exc:
            parser.error(str(exc))

    return load_settings(
        args.config,
        host=host,
        port=port,
        bucket=args.bucket,
        endpoint=args.endpoint,
        access_key=args.access_key,
        secret_key=args.secret_key,
        region=args.region,
        secure=args.secure,
        log_level=args.log_level,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the ASGI application using uvicorn."""
    settings = build_settings(argv)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=2,
        access_log=False,
    )


if __name__ == "__main__":
    main()
