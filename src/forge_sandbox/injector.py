# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

import re

from forge_sandbox.exceptions import ProvisionError
from forge_sandbox.utils.logger import logger
from forge_sandbox.workspace import Workspace

DEFAULT_CONTRACT_NAME = "Contract"

# Template placeholders
STUB_CONTRACT_FILE = "Counter.sol"
STUB_TEST_FILE = "Counter.t.sol"

STUB_CONTRACT = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

contract Counter {
    uint256 public number;

    function setNumber(uint256 newNumber) public {
        number = newNumber;
    }

    function increment() public {
        number++;
    }
}
"""

_CONTRACT_NAME_RE = re.compile(r"contract\s+(\w+)")


def extract_contract_name(source: str) -> str:
    """Return the identifier after the first ``contract`` keyword, or ``"Contract"``."""
    match = _CONTRACT_NAME_RE.search(source)
    return match.group(1) if match else DEFAULT_CONTRACT_NAME


def inject(workspace: Workspace, contract_source: str, test_source: str | None = None) -> str:
    """Write submitted sources into the workspace.

    The template's Counter contract is replaced with a known-good stub and
    its test is removed, so only the submission's tests run. Source content
    is not validated; forge reports problems at build time.

    Args:
        workspace: The provisioned workspace.
        contract_source: Solidity source, written to ``src/<Name>.sol``.
        test_source: Optional test source, written to ``test/<Name>.t.sol``.

    Returns:
        str: The derived contract name.

    Raises:
        ProvisionError: If any file cannot be written.
    """
    try:
        workspace.src_dir.mkdir(parents=True, exist_ok=True)
        workspace.test_dir.mkdir(parents=True, exist_ok=True)

        (workspace.src_dir / STUB_CONTRACT_FILE).write_text(STUB_CONTRACT, encoding="utf-8")
        (workspace.test_dir / STUB_TEST_FILE).unlink(missing_ok=True)

        contract_name = extract_contract_name(contract_source)
        logger.info(f"Extracted contract name: {contract_name}", workspace_id=workspace.id)

        (workspace.src_dir / f"{contract_name}.sol").write_text(contract_source, encoding="utf-8")
        if test_source is not None:
            (workspace.test_dir / f"{contract_name}.t.sol").write_text(test_source, encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to write sources into {workspace.root}: {e}")
        raise ProvisionError(f"Failed to write sources for workspace {workspace.id}: {e}") from e

    return contract_name
