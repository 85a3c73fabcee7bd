"""
Built-in command definitions for the opsh REPL.

This module contains the hierarchical structure of the commands that exist
regardless of the daemon's schema. Each entry may have:
- "help": one-line description
- "cmd": name of the callback run when the command ends here
- "children": keyword subcommands
- "args": positional parameters ({"name", "type", "help", "cmd", "children"})
"""

OUTPUT_FORMATS = ["cli", "json", "yaml"]


def _with_format(entry: dict) -> dict:
    """Add an optional 'format FORMAT' suffix running the same callback."""
    formats = {
        "format": {
            "help": "Output format",
            "args": [
                {
                    "name": "format",
                    "type": {"base": "enumeration", "enums": OUTPUT_FORMATS},
                    "help": "Output format",
                    "cmd": entry["cmd"],
                },
            ],
        },
    }
    return dict(entry, children=formats)


def build_command_tree() -> dict:
    """Build the built-in command structure."""
    return {
        # Operational mode
        "exec": {
            "children": {
                "configure": {
                    "help": "Enter configuration mode",
                    "cmd": "cmd_config",
                },
                "exit": {
                    "help": "Exit the shell",
                    "cmd": "cmd_exit_exec",
                },
                "list": {
                    "help": "List available commands",
                    "cmd": "cmd_list",
                },
                "show": {
                    "help": "Show running system information",
                    "children": {
                        "running-config": _with_format({
                            "help": "Show running configuration",
                            "cmd": "cmd_show_running",
                        }),
                        "state": {
                            "help": "Show operational state",
                            "cmd": "cmd_show_state",
                            "children": {
                                "path": {
                                    "help": "Restrict output to a data path",
                                    "args": [
                                        {
                                            "name": "path",
                                            "type": {"base": "string"},
                                            "help": "Data path",
                                            "cmd": "cmd_show_state",
                                        },
                                    ],
                                },
                            },
                        },
                        "yang": {
                            "help": "YANG information",
                            "children": {
                                "modules": {
                                    "help": "Show loaded schema modules",
                                    "cmd": "cmd_show_modules",
                                },
                            },
                        },
                    },
                },
            },
        },
        # Available at every configuration level
        "config": {
            "children": {
                "exit": {
                    "help": "Exit from this configuration level",
                    "cmd": "cmd_exit_config",
                },
                "end": {
                    "help": "Return to operational mode",
                    "cmd": "cmd_end",
                },
                "list": {
                    "help": "List available commands",
                    "cmd": "cmd_list",
                },
                "pwd": {
                    "help": "Show the current configuration context",
                    "cmd": "cmd_pwd",
                },
                "discard": {
                    "help": "Discard uncommitted changes",
                    "cmd": "cmd_discard",
                },
                "validate": {
                    "help": "Validate the candidate configuration",
                    "cmd": "cmd_validate",
                },
                "commit": {
                    "help": "Commit the current set of changes",
                    "cmd": "cmd_commit",
                    "children": {
                        "comment": {
                            "help": "Comment stored with the commit",
                            "args": [
                                {
                                    "name": "comment",
                                    "type": {"base": "string"},
                                    "help": "Commit comment",
                                    "cmd": "cmd_commit",
                                },
                            ],
                        },
                    },
                },
                "show": {
                    "help": "Show configuration information",
                    "children": {
                        "running-config": _with_format({
                            "help": "Show running configuration",
                            "cmd": "cmd_show_running",
                        }),
                        "candidate-config": _with_format({
                            "help": "Show candidate configuration",
                            "cmd": "cmd_show_candidate",
                        }),
                        "changes": {
                            "help": "Show uncommitted changes",
                            "cmd": "cmd_show_changes",
                        },
                    },
                },
            },
        },
    }
