# marketsync/cli/main.py
import asyncio
import json
import logging

import click
from dotenv import load_dotenv

from marketsync.core.config import get_settings
from marketsync.core.enums import MarketplacePlatform
from marketsync.core.logging_config import configure_logging
from marketsync.integrations.setup import build_services

logger = logging.getLogger(__name__)

PLATFORM_CHOICES = [platform.slug for platform in MarketplacePlatform]


@click.group()
@click.option('--log-level', default=None, help='Override LOG_LEVEL from settings')
def cli(log_level):
    """marketsync command line"""
    load_dotenv()
    configure_logging(log_level or get_settings().LOG_LEVEL)


@cli.command('sync-once')
def sync_once():
    """Run a single reconciliation cycle and print the telemetry counters"""

    async def _run():
        services = await build_services()
        try:
            await services.scheduler.run_cycle()
            return await services.telemetry.snapshot()
        finally:
            await services.aclose()

    metrics = asyncio.run(_run())
    click.echo(json.dumps(metrics.model_dump(), indent=2))


@cli.command('run')
def run():
    """Run reconciliation cycles on the configured interval until interrupted"""

    async def _run():
        services = await build_services()
        services.scheduler.start()
        try:
            await services.scheduler.run_cycle()
            while True:
                await asyncio.sleep(3600)
        finally:
            await services.aclose()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        click.echo("Stopped")


@cli.command('auth-url')
@click.argument('platform', type=click.Choice(PLATFORM_CHOICES))
@click.option('--state', default=None, help='Opaque state value echoed back on the callback')
def auth_url(platform, state):
    """Print the OAuth authorization URL for PLATFORM"""

    async def _url():
        services = await build_services()
        try:
            return services.oauth.authorization_url(MarketplacePlatform.from_slug(platform), state)
        finally:
            await services.aclose()

    click.echo(asyncio.run(_url()))


if __name__ == "__main__":
    cli()
