"""
opsh_lib.common - Shared utilities for opsh

This module provides:
- colors: ANSI color codes and logging functions
- prompts: Interactive prompt utilities
"""

from .colors import Colors, console, set_colors, log, warn, error, info
from .prompts import prompt_yes_no

__all__ = [
    'Colors', 'console', 'set_colors', 'log', 'warn', 'error', 'info',
    'prompt_yes_no',
]
