"""Config commands -- view and modify the stored configuration.

Provides the ``rootly-tui config`` sub-command group. Settings are
persisted as JSON in the config directory (see
:func:`~rootly_tui.config.config_path`); environment variables still
override them at run time.
"""

from __future__ import annotations

from typing import Any, Optional

import typer
from pydantic import ValidationError

from rootly_tui.commands.data import reported_errors
from rootly_tui.config import config_path, load_config, save_config
from rootly_tui.context import get_app_context
from rootly_tui.exceptions import InvalidUsageError
from rootly_tui.models import Config

config_app = typer.Typer(no_args_is_help=True)


def mask_secret(value: str) -> str:
    """Keep the last four characters of *value* and hide the rest."""
    if not value:
        return ""
    if len(value) <= 8:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


def apply_setting(config: Config, key: str, value: str) -> Config:
    """Return a copy of *config* with the dot-notation *key* set to *value*.

    The value is coerced to the type of the field it replaces (bool, int,
    or str) and the result is validated as a whole.

    Raises:
        InvalidUsageError: If the key is unknown or the value does not fit.
    """
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            raise InvalidUsageError(f"Invalid config key: {key}")
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        raise InvalidUsageError(f"Unknown config key: {key}")

    current = target[final_key]
    coerced: Any
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            raise InvalidUsageError(f"Expected integer for {key}, got: {value}") from None
    else:
        coerced = value
    target[final_key] = coerced

    try:
        return Config.model_validate(data)
    except ValidationError as exc:
        raise InvalidUsageError(f"Validation error: {exc}") from None


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the stored configuration with the API key masked.

    Example::

        rootly-tui config show
        rootly-tui --json config show
    """
    app_ctx = get_app_context(ctx)
    with reported_errors(app_ctx):
        config = load_config()
    data = config.model_dump(mode="json")
    data["api_key"] = mask_secret(config.api_key)
    app_ctx.output.info(f"Config file: {config_path()}")
    app_ctx.output.format_response(data)


@config_app.command("set")
def config_set(
    ctx: typer.Context,
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'cache.list_ttl_seconds')."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Example::

        rootly-tui config set timezone Europe/Paris
        rootly-tui config set cache.persistent false
    """
    app_ctx = get_app_context(ctx)
    with reported_errors(app_ctx):
        config = apply_setting(load_config(), key, value)
        save_config(config)
    shown = mask_secret(value) if key == "api_key" else value
    app_ctx.output.success(f"Set {key} = {shown}")


@config_app.command("init")
def config_init(
    ctx: typer.Context,
    api_key: Optional[str] = typer.Option(
        None, "--api-key", help="Rootly API key (prompted when omitted)."
    ),
    endpoint: Optional[str] = typer.Option(
        None, "--endpoint", help="API host, e.g. api.rootly.com."
    ),
    timezone: Optional[str] = typer.Option(
        None, "--timezone", help="IANA time zone for displayed timestamps."
    ),
    validate: bool = typer.Option(
        True, "--validate/--no-validate", help="Check the key against the API before saving."
    ),
) -> None:
    """Store the API key and endpoint.

    Example::

        rootly-tui config init --api-key rootly_xxx
        rootly-tui config init --endpoint api.eu.rootly.com --no-validate
    """
    from rootly_tui.client import RootlyClient

    app_ctx = get_app_context(ctx)
    with reported_errors(app_ctx):
        config = load_config()
        if api_key is None:
            api_key = typer.prompt("API key", hide_input=True)
        updates: dict[str, Any] = {"api_key": api_key.strip()}
        if endpoint is not None:
            updates["endpoint"] = endpoint.strip()
        if timezone is not None:
            updates["timezone"] = timezone.strip()
        config = config.model_copy(update=updates)
        if not config.is_valid():
            raise InvalidUsageError("Both an API key and an endpoint are required.")

        if validate:
            app_ctx.output.info(f"Validating API key against {config.base_url}...")
            with RootlyClient(config, app_ctx.log) as client:
                client.validate_api_key()

        save_config(config)
    app_ctx.output.success(f"Configuration saved to {config_path()}")
