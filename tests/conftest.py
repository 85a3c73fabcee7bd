"""Shared fixtures: a small routing schema and an in-memory daemon client."""

import copy

import pytest

from opsh_lib.client import Client
from opsh_lib.config import DataTree
from opsh_lib.errors import DaemonValidationError
from opsh_lib.repl import Cli
from opsh_lib.schema import load_schema


MODULE_YANG = r"""
module opsh-routing {
  yang-version 1.1;
  namespace "urn:opsh:routing";
  prefix rt;

  revision 2024-05-01;

  typedef ipv4-address {
    type string {
      pattern '(([0-9]|[1-9][0-9]|1[0-9][0-9]|2[0-4][0-9]|25[0-5])\.){3}'
            + '([0-9]|[1-9][0-9]|1[0-9][0-9]|2[0-4][0-9]|25[0-5])';
    }
  }

  typedef ipv4-prefix {
    type string {
      pattern '(([0-9]|[1-9][0-9]|1[0-9][0-9]|2[0-4][0-9]|25[0-5])\.){3}'
            + '([0-9]|[1-9][0-9]|1[0-9][0-9]|2[0-4][0-9]|25[0-5])'
            + '/(([0-9])|([1-2][0-9])|(3[0-2]))';
    }
  }

  typedef host-name {
    type string {
      length "1..63";
      pattern '[\p{N}\p{L}]+(-[\p{N}\p{L}]+)*';
    }
  }

  container system {
    leaf hostname {
      type host-name;
    }
    leaf-list dns-server {
      type ipv4-address;
      max-elements 2;
    }
  }

  list interface {
    key "name";
    description "Network interface";
    leaf name {
      type string;
    }
    leaf description {
      type string;
    }
    leaf mtu {
      type uint16 {
        range "68..9216";
      }
    }
    leaf enabled {
      type boolean;
    }
    container ipv4 {
      leaf-list address {
        type ipv4-prefix;
      }
    }
    choice mode {
      case routed {
        leaf vrf {
          type string;
        }
      }
      leaf bridge-group {
        type uint16;
      }
    }
    leaf oper-status {
      config false;
      type enumeration {
        enum up;
        enum down;
      }
    }
  }

  leaf shutdown {
    type empty;
  }

  container routing {
    list static-route {
      key "prefix nexthop";
      max-elements 2;
      leaf prefix {
        type ipv4-prefix;
      }
      leaf nexthop {
        type ipv4-address;
      }
      leaf metric {
        type uint32;
      }
    }
  }

  rpc clear-counters {
    description "Reset interface counters";
    input {
      leaf interface {
        type string;
        mandatory true;
      }
      leaf force {
        type boolean;
      }
    }
  }

  rpc restart {
    description "Restart the routing daemon";
  }
}
"""

MODULES = {"opsh-routing": ("2024-05-01", MODULE_YANG)}

TAGS_YANG = r"""
module opsh-tags {
  yang-version 1.1;
  namespace "urn:opsh:tags";
  prefix tg;

  revision 2024-06-01;

  container tags {
    presence "Enable tagging";
    leaf-list tag {
      type string;
      max-elements unbounded;
    }
    leaf weight {
      type decimal64 {
        fraction-digits 2;
      }
    }
  }
}
"""

BAD_PATTERN_YANG = r"""
module opsh-labels {
  yang-version 1.1;
  namespace "urn:opsh:labels";
  prefix lb;

  revision 2024-06-01;

  leaf label {
    type string {
      pattern '[a-';
    }
  }
}
"""

EXTRA_MODULES = {
    "opsh-tags": ("2024-06-01", TAGS_YANG),
    "opsh-labels": ("2024-06-01", BAD_PATTERN_YANG),
}


class FakeClient(Client):
    """Daemon stand-in that records every request."""

    def __init__(self, running=None, modules=None):
        self.running = running or {}
        self.modules = modules or MODULES
        self.schema_requests = []
        self.commits = []
        self.validated = []
        self.rpc_calls = []
        self.state = {"interface": [{"name": "eth0", "oper-status": "up"}]}
        self.reject = None
        self.rpc_output = {}

    def get_capabilities(self):
        return [{"name": name, "revision": revision}
                for name, (revision, _) in self.modules.items()]

    def get_schema(self, name, revision=None):
        self.schema_requests.append((name, revision))
        return self.modules[name][1]

    def get_running_config(self):
        return copy.deepcopy(self.running)

    def get_state(self, path=None):
        return {"path": path, "data": self.state}

    def commit(self, changes, comment=None):
        if self.reject:
            raise DaemonValidationError(self.reject)
        self.commits.append((changes, comment))
        return len(self.commits)

    def validate(self, config):
        if self.reject:
            raise DaemonValidationError(self.reject)
        self.validated.append(config)

    def execute_rpc(self, path, rpc_input):
        self.rpc_calls.append((path, rpc_input))
        return self.rpc_output


@pytest.fixture
def load_modules(tmp_path_factory):
    """Compile a {name: (revision, yang)} module set through a fresh cache."""
    def load(modules):
        return load_schema(FakeClient(modules=modules), tmp_path_factory.mktemp("modules"))
    return load


@pytest.fixture
def schema(load_modules):
    return load_modules(MODULES)


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def cli(client, schema):
    return Cli.create(client, schema, DataTree(), use_pager=False)


@pytest.fixture
def session(cli):
    return cli.session


@pytest.fixture
def commands(cli):
    return cli.commands


@pytest.fixture
def make_client():
    return FakeClient


@pytest.fixture
def extra_modules():
    """MODULES plus a module with unbounded lists and one libyang rejects."""
    return {**MODULES, **EXTRA_MODULES}
