"""
Output display for the opsh REPL.

Long output goes through the system pager unless paging is turned off.
"""

import pydoc


def pager(content: str) -> None:
    """Display content through a pager (like less)."""
    pydoc.pager(content)


def display(session, text: str) -> None:
    """Show command output, paged when the session allows it."""
    if not text:
        return
    if session.use_pager:
        pager(text)
    else:
        print(text)
