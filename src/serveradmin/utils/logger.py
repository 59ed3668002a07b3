"""
Logging utilities for the CLI
"""

import logging
import traceback
from rich.console import Console
from rich.markup import escape
from rich.logging import RichHandler

console = Console(stderr=True)

# Global debug flag
_DEBUG_MODE = False


def set_debug_mode(debug: bool):
    """Enable or disable debug mode globally"""
    global _DEBUG_MODE
    _DEBUG_MODE = debug

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(logging.WARNING)

def setup_logging(debug: bool = False):
    """Route library logging through rich; only warnings unless --debug"""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                rich_tracebacks=True,
                tracebacks_show_locals=debug,
                show_time=debug,
                show_path=debug
            )
        ],
        force=True,
    )
    set_debug_mode(debug)

    # Noisy third-party libraries
    logging.getLogger("docker").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def log_exception(e: Exception, context: str = ""):
    """Report an exception, with the stack trace in debug mode"""
    if context:
        console.print(f"[red]❌ {escape(context)}[/red]")

    console.print(f"[red]Error: {escape(str(e))}[/red]")

    if _DEBUG_MODE:
        console.print(f"[dim]{type(e).__name__} stack trace:[/dim]")
        console.print("[dim]" + escape("".join(traceback.format_tb(e.__traceback__))) + "[/dim]")
    else:
        console.print("[yellow]💡 Tip: Run with --debug flag for detailed stack trace[/yellow]")
