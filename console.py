"""Rich console output for the command-line entry point."""

from rich.console import Console
from rich.panel import Panel

from agent import AgentConfig, AgentResult

console = Console()


def instruction_start(instruction: str, url: str, config: AgentConfig) -> None:
    """Print what is about to run."""
    console.print(f"[bold]Instruction:[/bold] {instruction}")
    console.print(f"[bold]URL:[/bold] {url}")
    console.print(f"[bold]Model:[/bold] {config.model}")
    console.print(f"[dim]max turns {config.max_turns}, timeout {config.timeout_ms / 1000:g}s[/dim]")


def configuration_error(message: str) -> None:
    console.print(f"[bold red]Configuration error:[/bold red] {message}")


def result(agent_result: AgentResult) -> None:
    """Print the final result panel."""
    turns = f"{agent_result.turns} turn" + ("" if agent_result.turns == 1 else "s")
    if agent_result.success:
        console.print(Panel(f"{agent_result.summary}\n[dim]{turns}[/dim]", title="Done", border_style="green"))
    else:
        console.print(Panel(f"{agent_result.summary}\n[dim]{turns}[/dim]", title="Failed", border_style="red"))
