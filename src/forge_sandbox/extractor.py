# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

"""Turn forge output into structured results.

Test lines look like ``[PASS] test_Increment() (gas: 31303)`` or
``[FAIL: revert: nope] test_Bad() (gas: 8937)``. Artifacts are the JSON files
forge writes to ``out/<File>.sol/<Contract>.json``.
"""

import json
import re
from pathlib import Path

from forge_sandbox.exceptions import ArtifactNotFound
from forge_sandbox.models import DeployArtifact, TestRecord, TestSuiteResult
from forge_sandbox.utils.logger import logger

_MARKER_RE = re.compile(r"\[(?P<marker>PASS|FAIL)(?:[.:]\s*(?:Reason:\s*)?(?P<reason>[^\]]*))?\]")
_GAS_BRACKET_RE = re.compile(r"\[(\d+) gas\]")
_GAS_PAREN_RE = re.compile(r"\(gas:\s*(\d+)\)")
_GAS_FUZZ_MEAN_RE = re.compile(r"μ:\s*(\d+)")
_TRAILING_STATS_RE = re.compile(r"\s*\((?:gas|runs|calls):[^)]*\)\s*$")


def parse_test_line(line: str) -> TestRecord | None:
    """Parse one line of ``forge test`` output.

    Returns:
        TestRecord | None: The record, or None if the line has no PASS/FAIL marker.
    """
    marker = _MARKER_RE.search(line)
    if not marker:
        return None

    passed = marker.group("marker") == "PASS"
    reason = (marker.group("reason") or "").strip()

    name = line[marker.end() :].split("[", 1)[0].strip()
    name = _TRAILING_STATS_RE.sub("", name) or "Test"

    gas_match = _GAS_BRACKET_RE.search(line) or _GAS_PAREN_RE.search(line) or _GAS_FUZZ_MEAN_RE.search(line)

    if passed:
        message = "Test passed"
    else:
        message = reason or "Test failed"

    return TestRecord(
        name=name,
        status="passed" if passed else "failed",
        message=message,
        gas_used=int(gas_match.group(1)) if gas_match else None,
    )


def parse_test_output(stdout: str) -> list[TestRecord]:
    records = []
    for line in stdout.splitlines():
        record = parse_test_line(line)
        if record is not None:
            records.append(record)
    return records


def group_results(contract_name: str, tests: list[TestRecord]) -> list[TestSuiteResult]:
    """Wrap the tests under the contract name; no tests means an empty list, not an empty group."""
    if not tests:
        return []
    return [TestSuiteResult(name=contract_name, tests=tests)]


def artifact_path(out_dir: Path, contract_name: str) -> Path:
    return out_dir / f"{contract_name}.sol" / f"{contract_name}.json"


def load_artifact(out_dir: Path, contract_name: str) -> DeployArtifact:
    """Read the ABI and creation bytecode forge produced for ``contract_name``.

    Args:
        out_dir: The workspace ``out`` directory.
        contract_name: Name of the contract, also the source file stem.

    Returns:
        DeployArtifact: The contract's ABI and ``bytecode.object``.

    Raises:
        ArtifactNotFound: If the artifact is absent, unreadable or lacks ``abi``/``bytecode.object``.
    """
    path = artifact_path(out_dir, contract_name)
    logger.info(f"Looking for artifact for {contract_name}", path=str(path))

    if not path.is_file():
        available = sorted(p.name for p in out_dir.iterdir()) if out_dir.is_dir() else []
        logger.warning(f"Artifact not found at {path}. Available files in out directory: {available}")
        raise ArtifactNotFound(
            f"Could not find compiled artifact for {contract_name} at {path}. Available in out directory: {available}"
        )

    try:
        artifact = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ArtifactNotFound(f"Could not read compiled artifact for {contract_name}: {e}") from e

    if not isinstance(artifact, dict):
        raise ArtifactNotFound(f"Compiled artifact for {contract_name} is not a JSON object")

    bytecode = artifact.get("bytecode")
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object")

    if "abi" not in artifact or not isinstance(bytecode, str):
        logger.warning(f"Artifact {path} keys: {sorted(artifact)}")
        raise ArtifactNotFound(f"Compiled artifact for {contract_name} has no abi or bytecode.object")

    return DeployArtifact(contract_name=contract_name, abi=artifact["abi"], bytecode=bytecode)
