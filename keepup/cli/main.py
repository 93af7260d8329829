"""Command line interface for keepup.

Every option can also be set through the environment variable named in
its help text, which is how the service is configured in containers:

- REDIS_ADDR, REDIS_PORT, REDIS_DBNO: Redis holding records and the EOL cache
- TTL_SECONDS: lifetime of a host record
- API_TOKEN: token required in the x-api-token header
- LISTEN_PORT: HTTP port of the service
- EOL_API_BASE: endoflife.date API base URL
"""

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import click
import sentry_sdk

from .. import __version__
from .._eol import NO_EOL, UNKNOWN_VERSION, EndOfLifeDateSource, EOLCacheManager
from .._eol.sources import ENDOFLIFE_API_BASE
from .._store import RedisStore
from ..console import console, print_lookup_table, print_record, print_refresh_summary
from ..exceptions import (
    AuthenticationError,
    ConfigurationError,
    KeepupError,
    RecordNotFoundError,
)
from ..logging_config import LOG_LEVELS, logger, setup_logging
from ..packages import PackageVersions

DEFAULT_TTL_SECONDS = 86400
DEFAULT_LISTEN_PORT = 8080


@dataclass
class Config:
    """Configuration settings for keepup."""

    redis_addr: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    api_token: str = ""
    listen_port: int = DEFAULT_LISTEN_PORT
    eol_api_base: str = ENDOFLIFE_API_BASE

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.redis_addr:
            raise ConfigurationError("REDIS_ADDR is not defined")
        if not 0 < self.redis_port < 65536:
            raise ConfigurationError(f"Invalid REDIS_PORT: {self.redis_port}")
        if self.redis_db < 0:
            raise ConfigurationError(f"Invalid REDIS_DBNO: {self.redis_db}")
        if self.ttl_seconds <= 0:
            raise ConfigurationError(f"TTL_SECONDS must be positive, got {self.ttl_seconds}")
        if not 0 < self.listen_port < 65536:
            raise ConfigurationError(f"Invalid LISTEN_PORT: {self.listen_port}")

        parsed = urlparse(self.eol_api_base)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError("EOL_API_BASE must be an http:// or https:// URL")
        self.eol_api_base = self.eol_api_base.rstrip("/")

    def validate_server(self) -> None:
        """Validate settings needed to serve the HTTP API."""
        self.validate()
        if not self.api_token:
            raise ConfigurationError("API_TOKEN is not defined")


def _parse_int(name: str, value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"Can't configure {name}: {value!r} is not an integer")


def build_config(
    redis_addr: Optional[str] = None,
    redis_port: Optional[str] = None,
    redis_db: Optional[str] = None,
    ttl_seconds: Optional[str] = None,
    api_token: Optional[str] = None,
    listen_port: Optional[str] = None,
    eol_api_base: Optional[str] = None,
) -> Config:
    """
    Build configuration from raw option values.

    Raises:
        ConfigurationError: If a numeric setting is not an integer
    """
    return Config(
        redis_addr=redis_addr or "localhost",
        redis_port=_parse_int("REDIS_PORT", redis_port, 6379),
        redis_db=_parse_int("REDIS_DBNO", redis_db, 0),
        ttl_seconds=_parse_int("TTL_SECONDS", ttl_seconds, DEFAULT_TTL_SECONDS),
        api_token=api_token or "",
        listen_port=_parse_int("LISTEN_PORT", listen_port, DEFAULT_LISTEN_PORT),
        eol_api_base=eol_api_base or ENDOFLIFE_API_BASE,
    )


def evaluate_boolean(value: str) -> bool:
    """
    Evaluate string values as boolean.

    Args:
        value: String value to evaluate

    Returns:
        Boolean result
    """
    return value.lower() in ["true", "yes", "yeah", "1"]


def initialize_sentry() -> None:
    """Initialize Sentry for error tracking when telemetry is enabled."""
    if not evaluate_boolean(os.getenv("TELEMETRY", "false")):
        return

    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        logger.debug("TELEMETRY is enabled but SENTRY_DSN is not set")
        return

    def before_send(event, hint):
        """
        Filter events before sending to Sentry.
        Configuration, auth and not-found errors are caller mistakes, not service faults.
        """
        if "exc_info" in hint:
            exc_type, exc_value, tb = hint["exc_info"]
            if isinstance(exc_value, (ConfigurationError, AuthenticationError, RecordNotFoundError)):
                return None
        return event

    sentry_sdk.init(
        dsn=sentry_dsn,
        release=f"keepup@{__version__}",
        traces_sample_rate=0.1,
        before_send=before_send,
    )


def _load(ctx: click.Context, server: bool = False) -> Config:
    """Validate the configuration collected on the group, exiting on errors."""
    config: Config = ctx.obj
    try:
        if server:
            config.validate_server()
        else:
            config.validate()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    return config


def _cache_manager(config: Config, store: RedisStore) -> EOLCacheManager:
    return EOLCacheManager(store, source=EndOfLifeDateSource(api_base=config.eol_api_base))


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="keepup")
@click.option("--redis-addr", envvar="REDIS_ADDR", help="Redis host. Env: REDIS_ADDR")
@click.option("--redis-port", envvar="REDIS_PORT", help="Redis port. Env: REDIS_PORT")
@click.option("--redis-db", envvar="REDIS_DBNO", help="Redis database number. Env: REDIS_DBNO")
@click.option("--eol-api-base", envvar="EOL_API_BASE", help="endoflife.date API base URL. Env: EOL_API_BASE")
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Env: LOG_LEVEL",
)
@click.option("--structured-logs/--plain-logs", envvar="STRUCTURED_LOGS", default=False, help="Env: STRUCTURED_LOGS")
@click.pass_context
def cli(ctx, redis_addr, redis_port, redis_db, eol_api_base, log_level, structured_logs):
    """Track package versions across hosts and flag packages past upstream EOL."""
    setup_logging(level=log_level, structured=structured_logs)
    try:
        ctx.obj = build_config(
            redis_addr=redis_addr,
            redis_port=redis_port,
            redis_db=redis_db,
            eol_api_base=eol_api_base,
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)


@cli.command()
@click.option("--api-token", envvar="API_TOKEN", help="Token required in x-api-token. Env: API_TOKEN")
@click.option("--ttl-seconds", envvar="TTL_SECONDS", help="Host record lifetime. Env: TTL_SECONDS")
@click.option("--listen-port", envvar="LISTEN_PORT", help="HTTP port. Env: LISTEN_PORT")
@click.pass_context
def serve(ctx, api_token, ttl_seconds, listen_port):
    """Run the HTTP service."""
    import uvicorn

    from ..api import create_app

    config: Config = ctx.obj
    try:
        config.api_token = api_token or ""
        config.ttl_seconds = _parse_int("TTL_SECONDS", ttl_seconds, DEFAULT_TTL_SECONDS)
        config.listen_port = _parse_int("LISTEN_PORT", listen_port, DEFAULT_LISTEN_PORT)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    config = _load(ctx, server=True)
    initialize_sentry()

    store = RedisStore.from_config(config.redis_addr, config.redis_port, config.redis_db)
    cache = _cache_manager(config, store)
    repository = PackageVersions(store, cache.lookup, config.ttl_seconds)
    app = create_app(repository, config.api_token)

    logger.info(f"Starting keepup {__version__} on port {config.listen_port}")
    try:
        uvicorn.run(app, host="0.0.0.0", port=config.listen_port, log_config=None)
    finally:
        cache.close()
        logger.info("Exiting server")


@cli.command("refresh-cache")
@click.pass_context
def refresh_cache(ctx):
    """Rebuild the shared EOL cache from endoflife.date."""
    config = _load(ctx)
    store = RedisStore.from_config(config.redis_addr, config.redis_port, config.redis_db)
    with _cache_manager(config, store) as cache:
        try:
            document = cache.refresh_all()
        except KeepupError as e:
            console.print(f"[error]Cache refresh failed: {e}[/error]")
            sys.exit(1)
        print_refresh_summary(document, cache.packages)


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def lookup(ctx, names):
    """Resolve packages to their newest version and EOL marker."""
    config = _load(ctx)
    store = RedisStore.from_config(config.redis_addr, config.redis_port, config.redis_db)
    results = {}
    with _cache_manager(config, store) as cache:
        for name in names:
            try:
                results[name] = cache.lookup(name)
            except KeepupError as e:
                logger.warning(f"Lookup failed for {name}: {e}")
                results[name] = (UNKNOWN_VERSION, NO_EOL)
    print_lookup_table(results)


@cli.command()
@click.argument("inventory_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--ttl-seconds", envvar="TTL_SECONDS", help="Host record lifetime. Env: TTL_SECONDS")
@click.option("--json", "as_json", is_flag=True, help="Print the stored record as JSON.")
@click.pass_context
def check(ctx, inventory_file, ttl_seconds, as_json):
    """Submit an inventory JSON file and show the resulting record."""
    config: Config = ctx.obj
    try:
        config.ttl_seconds = _parse_int("TTL_SECONDS", ttl_seconds, DEFAULT_TTL_SECONDS)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    config = _load(ctx)

    try:
        inventory = json.loads(inventory_file.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[error]Cannot read inventory {inventory_file}: {e}[/error]")
        sys.exit(1)
    # Accept both the bare mapping and the PUT body shape
    if isinstance(inventory, dict) and isinstance(inventory.get("packages"), dict):
        inventory = inventory["packages"]
    if not isinstance(inventory, dict) or not all(isinstance(v, str) for v in inventory.values()):
        console.print("[error]Inventory must be a JSON object of package name -> version string[/error]")
        sys.exit(1)

    store = RedisStore.from_config(config.redis_addr, config.redis_port, config.redis_db)
    with _cache_manager(config, store) as cache:
        repository = PackageVersions(store, cache.lookup, config.ttl_seconds)
        try:
            record_id = repository.insert(inventory)
            record = repository.retrieve(record_id)
        except KeepupError as e:
            console.print(f"[error]Submission failed: {e}[/error]")
            sys.exit(1)

    if as_json:
        click.echo(record.to_json())
    else:
        print_record(record)


def main() -> None:
    """Entry point for the keepup command."""
    cli()
