"""Tests for command tree construction."""

import pytest

from opsh_lib.errors import SchemaError
from opsh_lib.repl import (
    Callback,
    CommandNode,
    Commands,
    ConfigContext,
    ConfigEdit,
    Configure,
    Operational,
    TokenKind,
)
from opsh_lib.repl.tree import argument_type
from opsh_lib.schema import LeafType

from conftest import MODULES


FLAG_YANG = """
module opsh-flags {
  yang-version 1.1;
  namespace "urn:opsh:flags";
  prefix fl;

  revision 2024-06-01;

  rpc flag {
    input {
      leaf now {
        type empty;
      }
    }
  }
}
"""


def test_builtin_tree_without_schema():
    commands = Commands.generate()
    assert set(commands.exec_root.keywords) == {"configure", "exit", "list", "show"}
    assert "commit" in commands.config_default.keywords
    assert commands.config_root.keywords == {}


def test_every_callback_is_registered(commands):
    for token in commands.tokens:
        if isinstance(token.action, Callback):
            assert callable(commands.callback(token.action.name))


def test_token_ids_resolve(commands):
    for token in commands.tokens:
        assert commands.lookup_token(token.id) is token


def test_duplicate_keyword_rejected(commands):
    with pytest.raises(SchemaError):
        commands.exec_root.add(CommandNode(TokenKind.WORD, "show"))


def test_container_command(commands):
    token = commands.config_root.keywords["system"]
    assert token.kind is TokenKind.WORD
    assert isinstance(token.action, ConfigEdit)
    assert token.enters_context
    assert set(token.keywords) == {"hostname", "dns-server"}


def test_list_command_chains_keys(commands):
    route = commands.config_root.keywords["routing"].keywords["static-route"]
    assert route.action is None
    prefix = route.params[0]
    nexthop = prefix.params[0]
    assert prefix.kind is TokenKind.PARAM and prefix.action is None
    assert isinstance(nexthop.action, ConfigEdit)
    assert nexthop.action.snode.path == "/routing/static-route"
    assert set(nexthop.keywords) == {"metric"}


def test_leaf_command(commands, schema):
    entry = commands.scope(Configure((ConfigContext(schema.find_path("/interface"),
                                                    (("name", "eth0"),)),)))
    mtu = entry.keywords["mtu"]
    assert mtu.negate_only
    assert mtu.action.snode.path == "/interface/mtu"
    assert mtu.params[0].argtype.base == "uint16"
    assert mtu.params[0].label == "<68-9216>"
    assert "oper-status" not in entry.keywords
    assert "name" not in entry.keywords


def test_choice_members_are_siblings(commands, schema):
    entry = commands.schema_tokens[schema.find_path("/interface")]
    assert {"vrf", "bridge-group"} <= set(entry.keywords)


def test_scope(commands, schema):
    assert commands.scope(Operational()) is commands.exec_root
    assert commands.scope(Configure()) is commands.config_root
    system = schema.find_path("/system")
    assert commands.scope(Configure((ConfigContext(system),))) is \
        commands.config_root.keywords["system"]


def test_rpc_commands(commands):
    rpc = commands.exec_root.keywords["rpc"]
    assert set(rpc.keywords) == {"clear-counters", "restart"}
    assert rpc.keywords["restart"].action == Callback("rpc:/restart")
    assert "rpc:/clear-counters" in commands.callbacks


def test_unsupported_rpc_is_omitted(load_modules, capsys):
    schema = load_modules({**MODULES, "opsh-flags": ("2024-06-01", FLAG_YANG)})
    commands = Commands.generate(schema)

    assert "flag" not in commands.exec_root.keywords["rpc"].keywords
    assert "restart" in commands.exec_root.keywords["rpc"].keywords
    assert "Omitting commands for /flag" in capsys.readouterr().out


def test_generate_builds_a_new_snapshot(schema, commands):
    other = Commands.generate(schema)
    assert other is not commands
    assert other.config_root is not commands.config_root
    assert set(other.config_root.keywords) == set(commands.config_root.keywords)


@pytest.mark.parametrize("data, expected", [
    ("string", LeafType("string")),
    ({"base": "string"}, LeafType("string")),
    ({"base": "enumeration", "enums": ["cli", "json"]},
     LeafType("enumeration", enums=("cli", "json"), placeholder="cli|json")),
])
def test_argument_type(data, expected):
    assert argument_type(data) == expected
