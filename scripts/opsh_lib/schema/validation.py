"""
Value validation for schema leaf types.

Values are carried around as canonical text. libyang does the type checking:
each configuration leaf gets a checker backed by a generated module whose
leafrefs point at the real leaves, so values can be stored against the target
type without building the surrounding list instances.
"""

import json
from typing import Any

import libyang

from opsh_lib.errors import SchemaError, SchemaValidationError


CHECKS_MODULE = "opsh-values"

INTEGER_BOUNDS = {
    "int8": "-128-127",
    "int16": "-32768-32767",
    "int32": "-2147483648-2147483647",
    "int64": "-9223372036854775808-9223372036854775807",
    "uint8": "0-255",
    "uint16": "0-65535",
    "uint32": "0-4294967295",
    "uint64": "0-18446744073709551615",
}

ADDRESS_PLACEHOLDERS = {
    "ipv4-address": "A.B.C.D",
    "ipv4-address-no-zone": "A.B.C.D",
    "ipv4-prefix": "A.B.C.D/M",
    "ipv6-address": "X:X::X:X",
    "ipv6-address-no-zone": "X:X::X:X",
    "ipv6-prefix": "X:X::X:X/M",
    "ip-address": "A.B.C.D|X:X::X:X",
    "ip-address-no-zone": "A.B.C.D|X:X::X:X",
    "ip-prefix": "A.B.C.D/M|X:X::X:X/M",
    "mac-address": "XX:XX:XX:XX:XX:XX",
}


def error_reason(error: libyang.LibyangError) -> str:
    """libyang's message for a rejected value, without path details."""
    parts = str(error).split(": ")
    for part in parts[1:]:
        part = part.strip()
        if part and not part.startswith(("/", "Data location", "Schema location")):
            return part.rstrip(".")
    return "invalid value"


def text_value(value: Any) -> str:
    """Canonical text for a JSON-encoded leaf value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None or value == [None]:
        return ""
    return str(value)


def placeholder(ytype, enums: tuple) -> str:
    """Help label shown for a value of this libyang type."""
    base = ytype.basename()
    name = ytype.name().split(":")[-1]
    if name in ADDRESS_PLACEHOLDERS:
        return ADDRESS_PLACEHOLDERS[name]
    if base in INTEGER_BOUNDS:
        ranges = ytype.range()
        if ranges:
            return "<" + ranges.replace("..", "-").replace(" ", "") + ">"
        return f"<{INTEGER_BOUNDS[base]}>"
    if base == "decimal64":
        return "<decimal>"
    if base == "boolean":
        return "true|false"
    if base == "enumeration":
        return "|".join(enums)
    if base == "empty":
        return ""
    return "WORD"


def _free_tree(dnode) -> None:
    while dnode.parent() is not None:
        dnode = dnode.parent()
    dnode.free()


class ValueChecker:
    """Checks operator input against the type of one schema leaf."""

    def __init__(self, ly_ctx, data_path: str):
        self.ly_ctx = ly_ctx
        self.data_path = data_path

    def __repr__(self) -> str:
        return f"ValueChecker({self.data_path!r})"

    def check(self, text: str) -> Any:
        """
        Store text in a scratch data node and read it back.

        Returns:
            The value in JSON encoding, in libyang's canonical form

        Raises:
            SchemaValidationError: If libyang rejects the value
        """
        try:
            dnode = self.ly_ctx.create_data_path(self.data_path, value=text)
        except libyang.LibyangError as e:
            raise SchemaValidationError(error_reason(e)) from e
        if dnode is None:
            raise SchemaValidationError("invalid value")
        try:
            # decimal64 keeps its exact digits
            data = json.loads(dnode.print_mem("json"), parse_float=str)
        finally:
            _free_tree(dnode)
        return next(iter(data.values()), None)


class ValueChecks:
    """
    Registry of value checkers for one libyang context.

    Configuration leaves may sit below lists, so their values are checked
    through top-level leafrefs in a generated module. RPC input leaves are
    checked in place.
    """

    def __init__(self, ly_ctx):
        self.ly_ctx = ly_ctx
        self.prefixes: dict[str, str] = {}
        self.targets: list[str] = []

    def _prefix(self, module: str) -> str:
        if module not in self.prefixes:
            self.prefixes[module] = f"m{len(self.prefixes)}"
        return self.prefixes[module]

    def register(self, lineage) -> ValueChecker:
        """
        Checker for the configuration leaf reached through lineage.

        Args:
            lineage: (module, name) pairs from the top-level node down
        """
        target = "".join(f"/{self._prefix(module)}:{name}" for module, name in lineage)
        self.targets.append(target)
        return ValueChecker(self.ly_ctx, f"/{CHECKS_MODULE}:v{len(self.targets) - 1}")

    def direct(self, data_path: str) -> ValueChecker:
        return ValueChecker(self.ly_ctx, data_path)

    def module_text(self) -> str:
        lines = [
            f"module {CHECKS_MODULE} {{",
            "  yang-version 1.1;",
            '  namespace "urn:opsh:values";',
            "  prefix opshv;",
        ]
        for module, prefix in self.prefixes.items():
            lines.append(f"  import {module} {{ prefix {prefix}; }}")
        for i, target in enumerate(self.targets):
            lines += [
                f"  leaf v{i} {{",
                "    config false;",
                "    type leafref {",
                f'      path "{target}";',
                "      require-instance false;",
                "    }",
                "  }",
            ]
        lines.append("}")
        return "\n".join(lines) + "\n"

    def load(self) -> None:
        """Add the generated module to the context."""
        if not self.targets:
            return
        try:
            self.ly_ctx.parse_module_str(self.module_text())
        except libyang.LibyangError as e:
            raise SchemaError(f"cannot check leaf values: {e}") from e


def enum_names(ytype) -> tuple:
    if ytype.basename() != "enumeration":
        return ()
    return tuple(enum.name() for enum in ytype.enums())

