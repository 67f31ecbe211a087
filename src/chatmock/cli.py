# src/chatmock/cli.py
"""CLI for the chatmock fake chat server.

Usage:
    # Start server with defaults (0.0.0.0:5000)
    chatmock serve

    # Start with custom configuration
    chatmock serve --config=my_chatmock.yaml --port=9000

    # Make streams and delays instant for CI
    chatmock serve --interval-ms=0 --max-delay-ms=0

    # Show the effective configuration (accepts the same override flags)
    chatmock show-config --format=json --failure-pct=100
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer

from chatmock.config import ChatMockConfig, load_config

app = typer.Typer(
    name="chatmock",
    help="chatmock: fake chat-completion server with streaming and fault injection.",
    no_args_is_help=True,
)

_ConfigFileOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to YAML configuration file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from chatmock import __version__

        typer.echo(f"chatmock {__version__}")
        raise typer.Exit()


def _build_overrides(
    *,
    host: str | None = None,
    port: int | None = None,
    interval_ms: int | None = None,
    chunk_chars: int | None = None,
    max_delay_ms: int | None = None,
    failure_pct: float | None = None,
    combined_failure_pct: float | None = None,
    log_level: str | None = None,
    json_logs: bool | None = None,
) -> dict[str, Any]:
    """Collect the CLI flags that were actually given into a config dict."""
    overrides: dict[str, Any] = {}

    server_overrides: dict[str, Any] = {}
    if host is not None:
        server_overrides["host"] = host
    if port is not None:
        server_overrides["port"] = port
    if server_overrides:
        overrides["server"] = server_overrides

    stream_overrides: dict[str, int] = {}
    if interval_ms is not None:
        stream_overrides["interval_ms"] = interval_ms
    if chunk_chars is not None:
        stream_overrides["chunk_chars"] = chunk_chars
    if stream_overrides:
        overrides["stream"] = stream_overrides

    fault_overrides: dict[str, Any] = {}
    if max_delay_ms is not None:
        fault_overrides["max_delay_ms"] = max_delay_ms
    if failure_pct is not None:
        fault_overrides["failure_pct"] = failure_pct
    if combined_failure_pct is not None:
        fault_overrides["combined_failure_pct"] = combined_failure_pct
    if fault_overrides:
        overrides["faults"] = fault_overrides

    logging_overrides: dict[str, Any] = {}
    if log_level is not None:
        logging_overrides["level"] = log_level.upper()
    if json_logs is not None:
        logging_overrides["json_output"] = json_logs
    if logging_overrides:
        overrides["logging"] = logging_overrides

    return overrides


# Override flags shared by serve and show-config. None means "not given".
_HostOption = Annotated[str | None, typer.Option("--host", "-h", help="Host address to bind to.")]
_PortOption = Annotated[int | None, typer.Option("--port", "-P", help="Port to listen on.", min=1, max=65535)]
_IntervalOption = Annotated[
    int | None,
    typer.Option("--interval-ms", help="Pause after each streamed content frame in milliseconds.", min=0),
]
_ChunkCharsOption = Annotated[
    int | None,
    typer.Option("--chunk-chars", help="Characters carried by each streamed content frame.", min=1),
]
_MaxDelayOption = Annotated[
    int | None,
    typer.Option("--max-delay-ms", help="Upper bound of the random delay on rand_sleep/rand_all routes.", min=0),
]
_FailurePctOption = Annotated[
    float | None,
    typer.Option("--failure-pct", help="Failure percentage on the rand_fail route (0-100).", min=0.0, max=100.0),
]
_CombinedFailurePctOption = Annotated[
    float | None,
    typer.Option(
        "--combined-failure-pct",
        help="Percentage of rand_all requests that take the failure path instead of the delay path (0-100).",
        min=0.0,
        max=100.0,
    ),
]
_LogLevelOption = Annotated[str | None, typer.Option("--log-level", help="Log level: DEBUG, INFO, WARNING or ERROR.")]
_JsonLogsOption = Annotated[bool | None, typer.Option("--json-logs/--console-logs", help="Emit JSON log lines.")]


def _load_or_exit(config_file: Path | None, cli_overrides: dict[str, Any]) -> ChatMockConfig:
    try:
        return load_config(config_file=config_file, cli_overrides=cli_overrides)
    except FileNotFoundError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e
    except Exception as e:
        typer.secho(f"Configuration error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e


@app.command()
def serve(
    config_file: _ConfigFileOption = None,
    host: _HostOption = None,
    port: _PortOption = None,
    interval_ms: _IntervalOption = None,
    chunk_chars: _ChunkCharsOption = None,
    max_delay_ms: _MaxDelayOption = None,
    failure_pct: _FailurePctOption = None,
    combined_failure_pct: _CombinedFailurePctOption = None,
    log_level: _LogLevelOption = None,
    json_logs: _JsonLogsOption = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """Start the chatmock fake chat server.

    Configuration precedence (highest to lowest):
    1. Command-line flags
    2. Config file (--config)
    3. Built-in defaults
    """
    cli_overrides = _build_overrides(
        host=host,
        port=port,
        interval_ms=interval_ms,
        chunk_chars=chunk_chars,
        max_delay_ms=max_delay_ms,
        failure_pct=failure_pct,
        combined_failure_pct=combined_failure_pct,
        log_level=log_level,
        json_logs=json_logs,
    )

    config = _load_or_exit(config_file, cli_overrides)

    from chatmock.logging_config import configure_logging

    configure_logging(config.logging)

    typer.secho(
        f"Starting chatmock server on {config.server.host}:{config.server.port}",
        fg=typer.colors.GREEN,
    )
    if config_file:
        typer.echo(f"  Config: {config_file}")
    typer.echo(f"  Stream: {config.stream.chunk_chars} chars every {config.stream.interval_ms}ms")
    typer.echo(
        f"  Faults: delay < {config.faults.max_delay_ms}ms, "
        f"failure {config.faults.failure_pct:.1f}%, "
        f"combined failure path {config.faults.combined_failure_pct:.1f}%"
    )
    typer.echo()

    import uvicorn

    from chatmock.server import create_app

    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_config=None,
    )


@app.command()
def show_config(
    config_file: _ConfigFileOption = None,
    host: _HostOption = None,
    port: _PortOption = None,
    interval_ms: _IntervalOption = None,
    chunk_chars: _ChunkCharsOption = None,
    max_delay_ms: _MaxDelayOption = None,
    failure_pct: _FailurePctOption = None,
    combined_failure_pct: _CombinedFailurePctOption = None,
    log_level: _LogLevelOption = None,
    json_logs: _JsonLogsOption = None,
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Output format: json or yaml.",
        ),
    ] = "yaml",
) -> None:
    """Show the effective configuration, with the same flags serve accepts."""
    cli_overrides = _build_overrides(
        host=host,
        port=port,
        interval_ms=interval_ms,
        chunk_chars=chunk_chars,
        max_delay_ms=max_delay_ms,
        failure_pct=failure_pct,
        combined_failure_pct=combined_failure_pct,
        log_level=log_level,
        json_logs=json_logs,
    )
    config_dict = _load_or_exit(config_file, cli_overrides).model_dump()

    if output_format == "json":
        typer.echo(json.dumps(config_dict, indent=2))
    else:
        import yaml

        typer.echo(yaml.dump(config_dict, default_flow_style=False, sort_keys=False))


def main() -> None:
    """Entry point for chatmock CLI."""
    app()


if __name__ == "__main__":
    main()
