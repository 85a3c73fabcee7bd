"""
RPC commands for the opsh REPL.

One handler serves every schema RPC; the command tree binds it to the RPC's
schema node when it builds the `rpc` commands.
"""

import json

from opsh_lib.common import log

from ..display import display


def cmd_rpc(rpc, commands, session, args: list) -> None:
    """Invoke an RPC with the input leaves given on the command line."""
    rpc_input = {}
    for name, value in args:
        leaf = rpc.child(name)
        rpc_input[name] = leaf.type.to_json(value) if leaf is not None else value

    output = session.client.execute_rpc(rpc.path, rpc_input)
    if output:
        display(session, json.dumps(output, indent=2))
    else:
        log(f"{rpc.name} complete")
