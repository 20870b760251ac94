"""CLI entry point for the browser automation agent."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
from rich.logging import RichHandler

import console as console_output
from agent import AgentConfig, AgentResult, BrowserAgent, ConfigurationError
from browser import BrowserController, ViewportSize

_LOGS_DIR = Path("logs")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one natural-language instruction against a web page")
    parser.add_argument("url", help="Starting URL to navigate to")
    parser.add_argument("instruction", help="Task to accomplish on the page")
    parser.add_argument(
        "--model",
        default=None,
        help="LLM model in provider/model format (default: $AGENT_BROWSER_MODEL or anthropic_vertex/claude-sonnet-4-5@20250929)",
    )
    parser.add_argument("--max-turns", type=int, default=None, help="Maximum model turns (default: 15)")
    parser.add_argument("--timeout-ms", type=int, default=None, help="Wall-clock limit in milliseconds (default: 120000)")
    parser.add_argument(
        "--no-headless",
        action="store_true",
        help="Run browser in visible (non-headless) mode",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Also print DEBUG logs to the terminal",
    )
    return parser.parse_args(argv)


def _setup_logging(verbose: bool) -> Path:
    """Log everything to a timestamped file; mirror to the terminal when verbose."""
    _LOGS_DIR.mkdir(parents=True, exist_ok=True)
    log_file = _LOGS_DIR / f"{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s - %(message)s", datefmt="%H:%M:%S"))
    root_logger.addHandler(file_handler)

    if verbose:
        root_logger.addHandler(RichHandler(console=console_output.console, show_path=False))

    return log_file


async def _run(args: argparse.Namespace, defaults: AgentConfig) -> AgentResult:
    browser = BrowserController(viewport=ViewportSize(), headless=not args.no_headless)
    agent = BrowserAgent(browser, defaults)
    try:
        await browser.start()
        await browser.navigate(args.url)
        result = await agent.execute(args.instruction)
        logging.getLogger(__name__).info("Final URL: %s", await browser.current_url())
        return result
    finally:
        try:
            await browser.stop()
        except Exception as e:
            # Ignore errors during browser cleanup (e.g., after Ctrl+C)
            logging.getLogger(__name__).debug("Browser cleanup failed: %s", e)


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = _parse_args(argv)
    log_file = _setup_logging(args.verbose)

    try:
        defaults = AgentConfig.from_env().with_overrides(
            model=args.model, max_turns=args.max_turns, timeout_ms=args.timeout_ms
        )
    except ConfigurationError as e:
        console_output.configuration_error(str(e))
        sys.exit(2)

    console_output.instruction_start(args.instruction, args.url, defaults)
    console_output.console.print(f"[dim]Log: {log_file}[/dim]")

    try:
        result = asyncio.run(_run(args, defaults))
    except ConfigurationError as e:
        console_output.configuration_error(str(e))
        sys.exit(2)
    except KeyboardInterrupt:
        console_output.console.print("\n[yellow]Interrupted by user (Ctrl+C)[/yellow]")
        sys.exit(130)  # Standard exit code for Ctrl+C

    console_output.result(result)
    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
