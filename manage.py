import click


@click.group()
def cli():
    """Management command interface for the application.

    Provides subcommands for server control, sending test notifications,
    and project maintenance utilities.
    """
    pass


@cli.command()
def runserver():
    """Start a FastAPI development server instance.

    Launches the application using the main module's entry point
    with development-optimized settings including auto-reload
    and debug logging when configured.
    Uses `runpy` to execute the `main.py` module as a script.
    """
    import runpy

    runpy.run_module("main", run_name="__main__")


@cli.command()
@click.option("--token", "-t", required=True, help="Device registration token")
@click.option("--title", default="Test notification", show_default=True)
@click.option("--body", default="Hello from Push Dispatch", show_default=True)
@click.option(
    "--kind",
    type=click.Choice(["basic", "sound"]),
    default="basic",
    show_default=True,
    help="Test notification flavour",
)
@click.option("--dry-run", is_flag=True, help="Validate with the gateway without delivering")
def sendtest(token, title, body, kind, dry_run):
    """Send a test ping to one device and print the dispatch result.

    Runs the same dispatch rule the HTTP endpoints use, so the printed
    result has the same shape as an API response.

    Parameters
    ----------
    token: str
        Registration token of the target device.
    title: str
        Alert title.
    body: str
        Alert body.
    kind: str
        "basic" for a plain alert, "sound" for the sound and badge test.
    dry_run: bool
        Ask the gateway to validate the message without delivering it.

    Examples
    --------
    Ping a device:
        $ python manage.py sendtest -t "<device token>"

    Validate a sound test without delivering it:
        $ python manage.py sendtest -t "<device token>" --kind sound --dry-run
    """
    import asyncio
    import json

    from config.base import get_settings
    from core.infrastructure.factory import get_clock
    from core.infrastructure.logging import RequestContextLogger, setup_logging
    from notifications.application.rules import DispatchNotificationRule
    from notifications.domain.entities import BasicIntent, SoundTestIntent
    from notifications.domain.payloads import PayloadBuilder
    from notifications.infrastructure.factory import (
        close_push_gateway,
        get_push_gateway,
    )

    setup_logging()
    settings = get_settings()
    intent_class = SoundTestIntent if kind == "sound" else BasicIntent

    async def run():
        gateway = await get_push_gateway()
        gateway.dry_run = gateway.dry_run or dry_run
        payload_builder = PayloadBuilder(
            clock=await get_clock(),
            silent_sound=settings.silent_sound,
            click_action=settings.click_action,
        )
        try:
            async with RequestContextLogger(command="sendtest"):
                return await DispatchNotificationRule(
                    intent=intent_class(token=token, title=title, body=body),
                    gateway=gateway,
                    payload_builder=payload_builder,
                    timeout_seconds=settings.gateway_timeout_seconds,
                ).execute()
        finally:
            await close_push_gateway()

    result = asyncio.run(run())
    click.echo(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))

    if not result.success:
        raise click.exceptions.Exit(1)


@cli.command()
def clean():
    """Remove Python cache and build artifacts.

    Recursively removes __pycache__ directories, .pyc files,
    and Ruff/pytest cache directories to resolve import issues and remove clutter
    from development environment.
    """
    import os
    import shutil

    for root, dirs, files in os.walk("."):
        for dir_name in dirs:
            if dir_name in ("__pycache__", ".ruff_cache", ".pytest_cache"):
                shutil.rmtree(os.path.join(root, dir_name))
        for file_name in files:
            if file_name.endswith(".pyc"):
                os.remove(os.path.join(root, file_name))

    click.echo("Cleaned Python, Ruff and pytest cache directories.")


if __name__ == "__main__":
    """CLI entry point for direct script execution.

    Initializes Click command group and processes command-line arguments
    for development task execution.
    """
    cli()
