"""intrace-verify — check a capture against the signed event log.

Usage:
    intrace-verify 3f2c9a
    intrace-verify 3f2c9a --json
    intrace-verify 3f2c9a --api-base https://intrace.example/api --event-log-base https://intrace.example/events
"""
from __future__ import annotations

import asyncio
import json
import logging

import click

from .client import HttpCaptureApi
from .config import VerifierConfig, get_config
from .errors import VerificationVerdict
from .registry import KeyRegistryClient
from .summary import format_capture_summary, format_verdict
from .verify import ProvenanceVerifier


async def run_verification(capture_id: str, config: VerifierConfig) -> VerificationVerdict:
    async with HttpCaptureApi(config) as api:
        registry = KeyRegistryClient(api, cache_ttl=config.key_cache_ttl)
        return await ProvenanceVerifier(api, registry).verify_capture(capture_id)


@click.command("intrace-verify")
@click.argument("capture_id")
@click.option("--api-base", default=None, help="Capture API base URL")
@click.option("--event-log-base", default=None, help="Event log base URL")
@click.option("--timeout", type=float, default=None, help="HTTP timeout in seconds")
@click.option("--json", "as_json", is_flag=True, help="Print the verdict as JSON")
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
def main(
    capture_id: str,
    api_base: str | None,
    event_log_base: str | None,
    timeout: float | None,
    as_json: bool,
    log_level: str | None,
) -> None:
    """Verify a capture's screenshot hash, event hash and operator signature.

    Exits 0 when every check that ran passed, 1 when any check failed,
    2 when the capture could not be loaded. Pending checks do not fail.
    """
    config = get_config().with_overrides(
        api_base=api_base.rstrip("/") if api_base else None,
        event_log_base=event_log_base.rstrip("/") if event_log_base else None,
        http_timeout=timeout,
        log_level=log_level.upper() if log_level else None,
    )
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")

    if not capture_id.strip():
        raise click.BadParameter("capture id must not be empty", param_hint="CAPTURE_ID")

    verdict = asyncio.run(run_verification(capture_id, config))

    if as_json:
        click.echo(json.dumps(verdict.to_dict(), indent=2))
    else:
        if verdict.metadata is not None:
            click.echo(format_capture_summary(verdict.metadata, verdict.event))
            click.echo()
        click.echo(format_verdict(verdict))

    if verdict.error:
        raise SystemExit(2)
    if not verdict.all_passed:
        raise SystemExit(1)
