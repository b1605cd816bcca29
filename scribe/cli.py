"""CLI entry point for scribe"""

import typer
import logging
from pathlib import Path

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.FileHandler("scribe.log"),
        logging.StreamHandler(),
    ]
)

app = typer.Typer(
    name="scribe",
    help="Academic writing agent",
    add_completion=False,
)


@app.command()
def serve(
    port: int = typer.Option(None, "--port", "-p"),
    host: str = typer.Option(None, "--host"),
):
    """Start HTTP API server"""
    from scribe.config.config import Config
    from scribe.server.server import start_server

    config = Config.load()
    start_server(host=host or config.server.host, port=port or config.server.port)


@app.command()
def chat(
    message: str = typer.Argument(..., help="Message to send"),
    model: str = typer.Option(None, "--model", "-m", help="deepseek, deepseek-reasoner or qwen"),
    mode: str = typer.Option("discuss", "--mode", help="discuss or write"),
    file: Path = typer.Option(None, "--file", "-f", help="Paper to discuss or edit"),
    api_key: str = typer.Option(None, "--api-key", envvar="SCRIBE_API_KEY"),
):
    """Run a single agent turn (non-interactive)"""
    import asyncio
    from rich.console import Console
    from scribe.agent.agent import Agent, AgentRequest
    from scribe.agent.events import ChunkEvent, CompleteEvent, ErrorEvent
    from scribe.config.config import Config
    from scribe.provider.base import ModelInvocationError
    from scribe.provider.router import ModelRouter

    console = Console()
    config = Config.load()
    selector = model or config.default_model
    content = file.read_text() if file else ""

    try:
        provider = ModelRouter(config).get_provider(selector, api_key)
    except (ValueError, ModelInvocationError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    agent = Agent(provider=provider, config=config.agent, model_label=selector)
    request = AgentRequest(user_input=message, content=content, mode=mode)

    async def run_chat() -> int:
        turn = 0
        async for event in agent.stream(request):
            if isinstance(event, ChunkEvent):
                if event.iteration != turn:
                    if turn:
                        console.print()
                    turn = event.iteration
                if event.reasoning_delta:
                    console.print(event.reasoning_delta, end="", style="dim", highlight=False)
                if event.content_delta:
                    console.print(event.content_delta, end="", highlight=False)
            elif isinstance(event, CompleteEvent):
                console.print()
                for call, result in zip(event.outcome.tool_calls, event.outcome.tool_results):
                    status = "[green]ok[/green]" if result.success else f"[red]{result.error}[/red]"
                    console.print(f"[dim]tool {call.name}:[/dim] {status}")
                return 0
            elif isinstance(event, ErrorEvent):
                console.print()
                console.print(f"[red]Error ({event.kind}): {event.message}[/red]")
                if event.hint:
                    console.print(event.hint)
                return 1
        return 1

    raise typer.Exit(asyncio.run(run_chat()))


@app.command()
def tools():
    """List the tools the agent can call"""
    from rich.console import Console
    from rich.table import Table
    from scribe.tool.registry import ToolRegistry

    table = Table("Tool", "Description")
    for schema in ToolRegistry().get_schemas():
        table.add_row(schema["name"], schema["description"])
    Console().print(table)


def main():
    app()


if __name__ == "__main__":
    main()
