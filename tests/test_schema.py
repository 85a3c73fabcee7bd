"""Tests for schema loading, leaf types and the module cache."""

import pytest

from opsh_lib.errors import SchemaValidationError
from opsh_lib.schema import LeafType, NodeKind, load_schema

from conftest import MODULE_YANG


class TestLeafType:

    @pytest.mark.parametrize("path, text, expected", [
        ("/interface/mtu", "1500", "1500"),
        ("/interface/enabled", "true", "true"),
        ("/interface/bridge-group", "10", "10"),
        ("/system/hostname", "r1", "r1"),
        ("/system/hostname", "kärnan-2", "kärnan-2"),
        ("/system/dns-server", "192.0.2.1", "192.0.2.1"),
        ("/routing/static-route/prefix", "10.0.0.0/8", "10.0.0.0/8"),
    ])
    def test_canonicalize(self, schema, path, text, expected):
        assert schema.find_path(path).type.canonicalize(text) == expected

    @pytest.mark.parametrize("path, text", [
        ("/interface/mtu", "10"),
        ("/interface/mtu", "ten"),
        ("/interface/enabled", "yes"),
        ("/system/hostname", "r1_lab"),
        ("/system/hostname", "-r1"),
        ("/system/hostname", "r" * 64),
        ("/routing/static-route/prefix", "10.0.0.1"),
        ("/routing/static-route/nexthop", "300.1.1.1"),
    ])
    def test_rejects(self, schema, path, text):
        with pytest.raises(SchemaValidationError) as exc:
            schema.find_path(path).type.canonicalize(text)
        assert str(exc.value)

    def test_rpc_input_is_checked(self, schema):
        rpc = {rpc.path: rpc for rpc in schema.rpcs()}["/clear-counters"]
        force = rpc.child("force")
        assert force.type.to_json("true") is True
        with pytest.raises(SchemaValidationError):
            force.type.canonicalize("maybe")

    def test_enumeration_without_checker(self):
        leaf_type = LeafType("enumeration", enums=("up", "down"))
        assert leaf_type.canonicalize("up") == "up"
        with pytest.raises(SchemaValidationError) as exc:
            leaf_type.canonicalize("sideways")
        assert str(exc.value) == "must be one of: up, down"

    def test_json_encoding(self, schema):
        assert schema.find_path("/interface/mtu").type.to_json("9000") == 9000
        assert schema.find_path("/interface/enabled").type.to_json("false") is False
        assert schema.find_path("/shutdown").type.to_json("") == [None]
        assert schema.find_path("/interface/enabled").type.from_json(True) == "true"
        assert schema.find_path("/routing/static-route/metric").type.from_json(7) == "7"
        assert schema.find_path("/shutdown").type.from_json([None]) == ""

    def test_decimal_canonical_form(self, load_modules, extra_modules):
        schema = load_modules(extra_modules)
        assert schema.find_path("/tags/weight").type.canonicalize("1.50") == "1.5"

    @pytest.mark.parametrize("path, placeholder", [
        ("/interface/mtu", "<68-9216>"),
        ("/interface/bridge-group", "<0-65535>"),
        ("/routing/static-route/prefix", "A.B.C.D/M"),
        ("/system/dns-server", "A.B.C.D"),
        ("/interface/enabled", "true|false"),
        ("/interface/oper-status", "up|down"),
        ("/interface/description", "WORD"),
    ])
    def test_placeholder(self, schema, path, placeholder):
        assert schema.find_path(path).type.placeholder == placeholder


class TestBuildSchema:

    def test_nodes(self, schema):
        interface = schema.find_path("/interface")
        assert interface.kind is NodeKind.LIST
        assert interface.keys == ("name",)
        assert interface.module == "opsh-routing"
        assert interface.description == "Network interface"
        assert [k.name for k in interface.key_nodes()] == ["name"]
        assert schema.find_path("/interface/oper-status").config is False
        assert schema.find_path("/interface/vrf").choice == ("mode", "routed")
        assert schema.find_path("/interface/bridge-group").choice == ("mode", "bridge-group")
        assert schema.find_path("/interface/mtu").choice is None

    def test_top_level_order(self, schema):
        names = [node.name for node in schema.top_level()]
        assert names == ["system", "interface", "shutdown", "routing"]

    def test_rpcs(self, schema):
        rpcs = {rpc.path: rpc for rpc in schema.rpcs()}
        assert set(rpcs) == {"/clear-counters", "/restart"}
        rpc = rpcs["/clear-counters"]
        assert rpc.kind is NodeKind.RPC
        assert [leaf.name for leaf in rpc.children] == ["interface", "force"]
        assert rpc.children[0].mandatory
        assert not rpc.children[1].mandatory

    def test_ancestors(self, schema):
        address = schema.find_path("/interface/ipv4/address")
        interface = schema.find_path("/interface")
        assert [n.name for n in schema.ancestors(address)] == ["interface", "ipv4", "address"]
        assert [n.name for n in schema.ancestors(address, interface)] == ["ipv4", "address"]
        assert schema.ancestors(address, schema.find_path("/system")) is None

    def test_max_elements(self, schema):
        assert schema.find_path("/routing/static-route").max_elements == 2
        assert schema.find_path("/system/dns-server").max_elements == 2
        assert schema.find_path("/interface").max_elements is None

    def test_unbounded_max_elements(self, load_modules, extra_modules):
        schema = load_modules(extra_modules)
        assert schema.find_path("/tags/tag").max_elements is None
        assert schema.find_path("/tags").presence

    def test_rejected_module_is_skipped(self, load_modules, extra_modules, capsys):
        schema = load_modules(extra_modules)
        assert [m.name for m in schema.modules] == ["opsh-routing", "opsh-tags"]
        assert schema.find_path("/label") is None
        assert "Skipping schema module opsh-labels" in capsys.readouterr().out
        assert schema.find_path("/system/hostname").type.canonicalize("r1") == "r1"

    def test_duplicate_top_level_across_modules(self, load_modules, capsys):
        other = MODULE_YANG.replace("module opsh-routing", "module opsh-other") \
            .replace("urn:opsh:routing", "urn:opsh:other")
        schema = load_modules({
            "opsh-routing": ("2024-05-01", MODULE_YANG),
            "opsh-other": ("2024-05-01", other),
        })
        assert len(schema.top_level()) == 4
        assert all(node.module == "opsh-routing" for node in schema.top_level())
        assert "opsh-other:system" in capsys.readouterr().out


class TestLoadSchema:

    def test_fetches_and_caches(self, client, tmp_path):
        schema = load_schema(client, tmp_path)
        cache_file = tmp_path / "opsh-routing@2024-05-01.yang"
        assert cache_file.read_text() == MODULE_YANG
        assert client.schema_requests == [("opsh-routing", "2024-05-01")]
        assert schema.find_path("/system/hostname") is not None

    def test_reads_cache_first(self, client, tmp_path):
        cached = (
            "module opsh-routing {\n"
            "  yang-version 1.1;\n"
            '  namespace "urn:opsh:routing";\n'
            "  prefix rt;\n"
            "  revision 2024-05-01;\n"
            "  container cached;\n"
            "}\n"
        )
        (tmp_path / "opsh-routing@2024-05-01.yang").write_text(cached)
        schema = load_schema(client, tmp_path)
        assert [node.name for node in schema.top_level()] == ["cached"]
        assert client.schema_requests == []

    def test_cache_write_failure_is_not_fatal(self, client, tmp_path, capsys):
        schema = load_schema(client, tmp_path / "missing")
        assert schema.find_path("/interface") is not None
        assert "Failed to cache" in capsys.readouterr().out
