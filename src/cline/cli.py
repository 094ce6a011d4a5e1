from __future__ import annotations
import signal
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
import typer

from .bootstrap import build_app
from .config_loader import ConfigError
from .core.agent import ClineAgent, default_settings_dir
from .core.cancellation import CancelToken
from .core.errors import ProviderClientError
from .logging_config import configure_logging
from .secrets.keys import CredentialResolver
from .ui.std import StdUI

app = typer.Typer(add_completion=False, help="Chat with an LLM provider from the terminal.")
config_app = typer.Typer(add_completion=False, help="Manage cline settings and API keys.")
app.add_typer(config_app, name="config")

DEFAULT_MCP_SERVER = "http://127.0.0.1:8080"


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    server: str = typer.Option(DEFAULT_MCP_SERVER, "--server", "-s", help="MCP server URL"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug mode"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="API provider (openai|anthropic|echo)"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model ID override"),
    env: Optional[Path] = typer.Option(None, "--env", "-e", help="Path to .env file"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Per-turn deadline in seconds"),
):
    configure_logging(debug)
    if timeout is not None and timeout <= 0:
        raise typer.BadParameter("must be a positive number of seconds", param_hint="--timeout")

    if ctx.invoked_subcommand is not None:
        return

    ui = StdUI()
    ui.info("Initializing Cline CLI...")
    settings_dir = default_settings_dir()

    try:
        ctx_app = build_app(settings_dir=settings_dir, provider=provider, model=model, env_file=env, ui=ui)
    except (ConfigError, ProviderClientError, ValueError) as e:
        ui.error(f"Error: {e}")
        raise typer.Exit(code=1)

    if debug:
        api_config = ctx_app["api_config"]
        ui.info(f"Using provider: {api_config.provider}")
        ui.info(f"Using model: {getattr(ctx_app['handler'], 'model', None)}")
        ui.info(f"Using MCP server: {server}")

    agent = ClineAgent.bootstrap(
        ui,
        mcp_server=server,
        settings_dir=settings_dir,
        debug=debug,
        handler=ctx_app["handler"],
        system_prompt=ctx_app["system_prompt"],
    )
    _chat_loop(agent, ui, timeout)


def _chat_loop(agent: ClineAgent, ui: StdUI, timeout: Optional[float]) -> None:
    ui.info('\nWelcome to Cline CLI! Type "quit" to exit.\n')
    while True:
        try:
            user_input = input("cline> ").strip()
        except (EOFError, KeyboardInterrupt):
            typer.echo("\nBye.")
            return

        if not user_input:
            continue
        if user_input.lower() in ("quit", "/quit", "/exit"):
            typer.echo("Bye.")
            return

        # Turn contract: the loop appends the user turn, the agent appends the reply
        agent.history.append("user", user_input)
        cancel = CancelToken()
        typer.echo("")
        try:
            with cancel_on_interrupt(cancel):
                agent.chat(
                    user_input,
                    on_text=lambda piece: typer.echo(piece, nl=False),
                    cancel=cancel,
                    timeout=timeout,
                )
        except KeyboardInterrupt:
            # second Ctrl+C while the stream was blocked; the agent has recorded the turn
            typer.echo("\n[stream interrupted]")
            continue
        if cancel.cancelled:
            typer.echo("\n[stream interrupted]")
            continue
        typer.echo("\n")


@contextmanager
def cancel_on_interrupt(token: CancelToken) -> Iterator[CancelToken]:
    """
    Route Ctrl+C to `token` while a reply streams.

    The first SIGINT only cancels the token; the adapter stops at its next
    frame and closes the vendor stream. A second SIGINT raises
    KeyboardInterrupt as usual. The previous handler is restored on exit.
    """
    if threading.current_thread() is not threading.main_thread():
        yield token
        return

    def _on_sigint(signum, frame):
        if token.cancelled:
            raise KeyboardInterrupt
        token.cancel()

    previous = signal.signal(signal.SIGINT, _on_sigint)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)


@config_app.command("set-key")
def set_key(provider: str = typer.Argument(..., help="Provider name, e.g. openai")):
    """Store an API key for PROVIDER in the system keychain."""
    ui = StdUI()
    api_key = typer.prompt(f"Enter API key for {provider}", hide_input=True, default="", show_default=False)
    if not api_key.strip():
        ui.warn("No key provided. Operation cancelled.")
        return

    try:
        CredentialResolver().store(provider.strip().lower(), api_key.strip())
    except Exception as e:
        ui.error(f"Failed to save {provider} API key: {e}")
        raise typer.Exit(code=1)
    ui.info(f"{provider} API key saved.")


if __name__ == "__main__":
    app()
