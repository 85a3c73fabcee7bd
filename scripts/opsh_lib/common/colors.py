"""
ANSI color codes and logging utilities for opsh.
"""

from rich.console import Console


class Colors:
    """ANSI color escape codes for terminal output."""
    RED = "\033[0;31m"
    GREEN = "\033[0;32m"
    YELLOW = "\033[1;33m"
    CYAN = "\033[0;36m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    NC = "\033[0m"  # No Color / Reset

    @classmethod
    def disable(cls) -> None:
        """Turn every escape code into an empty string."""
        for name in ("RED", "GREEN", "YELLOW", "CYAN", "BOLD", "DIM", "NC"):
            setattr(cls, name, "")


# Shared console for tabular output
console = Console(highlight=False)


def set_colors(enabled: bool) -> None:
    """Enable or disable colored output for the whole process."""
    if not enabled:
        Colors.disable()
        console.no_color = True


def log(msg: str) -> None:
    """Log a success/info message in green."""
    print(f"{Colors.GREEN}[+]{Colors.NC} {msg}")


def warn(msg: str) -> None:
    """Log a warning message in yellow."""
    print(f"{Colors.YELLOW}[!]{Colors.NC} {msg}")


def error(msg: str) -> None:
    """Log an error message in red."""
    print(f"{Colors.RED}[ERROR]{Colors.NC} {msg}")


def info(msg: str) -> None:
    """Log an informational message in cyan."""
    print(f"{Colors.CYAN}[i]{Colors.NC} {msg}")
