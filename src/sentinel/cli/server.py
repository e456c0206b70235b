"""CLI command: sentinel server — start the web API."""

from __future__ import annotations

import click
from rich.console import Console

console = Console(stderr=True)


@click.command()
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to listen on (default: 8080).",
)
@click.pass_context
def server(ctx: click.Context, port: int | None) -> None:
    """Start the Sentinel web API."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]Web dependencies not installed.[/red]\n"
            "Install with: pip install sentinel-scan[web]"
        )
        raise SystemExit(1)

    config = ctx.obj["config"]
    if port is not None:
        config.web_port = port

    console.print(
        f"[bold]Sentinel[/bold] API starting on "
        f"[cyan]http://{config.web_host}:{config.web_port}/api[/cyan]"
    )
    if not config.api_key:
        console.print(
            "  [yellow]No analysis API key configured; scans will fail.[/yellow]\n"
            "  Set SENTINEL_API_KEY or api_key in config.yaml.\n"
        )

    import asyncio

    from sentinel.web.app import create_app

    async def _run() -> None:
        app = await create_app(config)
        server_config = uvicorn.Config(
            app,
            host=config.web_host,
            port=config.web_port,
            log_level="debug" if config.verbose else "info",
        )
        srv = uvicorn.Server(server_config)
        await srv.serve()

    asyncio.run(_run())
