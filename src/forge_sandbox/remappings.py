# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

"""Import remappings written into every workspace.

forge resolves an import against the first remapping whose prefix matches,
so a specific prefix must come before any shorter prefix it extends. The same
ordered set is rendered into ``remappings.txt`` and into the ``remappings``
array of ``foundry.toml`` so both sources agree whichever one forge reads.
"""

import re
import tomllib
from collections.abc import Sequence
from dataclasses import dataclass

REMAPPINGS_FILE = "remappings.txt"
FOUNDRY_TOML = "foundry.toml"

_TOML_ARRAY_RE = re.compile(r"^([ \t]*)remappings\s*=\s*\[[^\]]*\]", re.MULTILINE)


@dataclass(frozen=True)
class Remapping:
    """An import alias: ``prefix`` is rewritten to ``target`` when forge resolves imports."""

    prefix: str
    target: str

    def __str__(self) -> str:
        return f"{self.prefix}={self.target}"


DEFAULT_REMAPPINGS: tuple[Remapping, ...] = (
    Remapping("@uniswap/v4-core/contracts/", "lib/v4-core/src/"),
    Remapping("@uniswap/v4-periphery/contracts/", "lib/v4-periphery/src/"),
    Remapping("@uniswap/v4-core/", "lib/v4-core/"),
    Remapping("@uniswap/v4-periphery/", "lib/v4-periphery/"),
    Remapping("@openzeppelin/", "lib/openzeppelin-contracts/"),
    Remapping("forge-std/", "lib/forge-std/src/"),
    Remapping("v4-core/", "lib/v4-core/"),
    Remapping("v4-periphery/", "lib/v4-periphery/"),
)


def parse_remapping(entry: str) -> Remapping:
    """Parse a ``prefix=target`` line.

    Raises:
        ValueError: If either side of the ``=`` is empty.
    """
    prefix, sep, target = entry.strip().partition("=")
    if not sep or not prefix or not target:
        raise ValueError(f"Invalid remapping: {entry!r}")
    return Remapping(prefix, target)


def validate_order(remappings: Sequence[Remapping]) -> None:
    """Reject a set where a general prefix shadows a more specific one listed after it.

    Raises:
        ValueError: On the first shadowed entry.
    """
    for i, general in enumerate(remappings):
        for specific in remappings[i + 1 :]:
            if specific.prefix != general.prefix and specific.prefix.startswith(general.prefix):
                raise ValueError(
                    f"Remapping {specific.prefix!r} must be listed before {general.prefix!r}"
                )


def render_remappings_txt(remappings: Sequence[Remapping]) -> str:
    return "".join(f"{r}\n" for r in remappings)


def render_toml_array(remappings: Sequence[Remapping]) -> str:
    lines = ",\n".join(f'    "{r}"' for r in remappings)
    return f"remappings = [\n{lines}\n]"


def apply_to_foundry_toml(content: str, remappings: Sequence[Remapping]) -> str:
    """Return ``content`` with its remappings array replaced, or a new one appended.

    Only the first array assigned at the start of a line is replaced, so a
    commented-out array is left alone. A file without one gets the array
    appended at the end.
    """
    block = render_toml_array(remappings)
    if _TOML_ARRAY_RE.search(content):
        return _TOML_ARRAY_RE.sub(lambda m: m.group(1) + block, content, count=1)
    if not content:
        return f"{block}\n"
    return content.rstrip("\n") + f"\n\n{block}\n"


def parse_remappings_txt(text: str) -> list[Remapping]:
    return [parse_remapping(line) for line in text.splitlines() if line.strip()]


def read_toml_remappings(content: str) -> list[Remapping]:
    """Return the first ``remappings`` array in a foundry.toml, top level or inside a table.

    Raises:
        ValueError: If the content is not valid TOML or an entry is malformed.
    """

    def _walk(node: dict) -> list[Remapping] | None:
        for key, value in node.items():
            if key == "remappings" and isinstance(value, list):
                return [parse_remapping(v) for v in value]
            if isinstance(value, dict):
                found = _walk(value)
                if found is not None:
                    return found
        return None

    return _walk(tomllib.loads(content)) or []
