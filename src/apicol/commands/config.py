"""Config commands -- view and modify global configuration.

Provides the ``apicol config`` sub-command group for reading, updating, and
resetting the user's :class:`~apicol.models.GlobalConfig`. The stored
``import_settings`` are the lowest-precedence defaults for every import;
``output.collection_format`` picks JSON or YAML for ``convert``.
"""

from __future__ import annotations

import json

import typer
from pydantic import ValidationError

from apicol.exit_codes import EXIT_INVALID_USAGE
from apicol.output import emit_document, error, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show current configuration.

    Example::

        apicol config show
    """
    from apicol.config import get_config_dir, load_global_config

    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    emit_document(json.dumps(config.model_dump(mode="json"), indent=2))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'import_settings.operation_order')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Booleans accept ``true``/``1``/``yes``; everything else is stored as a
    string and validated against :class:`~apicol.models.GlobalConfig`.

    Example::

        apicol config set import_settings.operation_order priority
        apicol config set import_settings.base_url_variable ApiRoot
        apicol config set output.collection_format yaml
    """
    from apicol.config import load_global_config, save_global_config
    from apicol.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    if isinstance(target[final_key], bool):
        coerced: object = value.lower() in ("true", "1", "yes")
    else:
        coerced = value
    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is active.

    Example::

        apicol --force config reset
    """
    from apicol.config import save_global_config
    from apicol.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
