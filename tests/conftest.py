import stat
import sys
from pathlib import Path
from typing import Any

import pytest

from forge_sandbox.config import ForgeSandboxConfig
from forge_sandbox.workspace import WorkspaceProvisioner

TEMPLATE_FOUNDRY_TOML = """[profile.default]
src = "src"
out = "out"
libs = ["lib"]
remappings = [
    "forge-std/=lib/forge-std/src/",
]

# See more config options https://github.com/foundry-rs/foundry/blob/master/crates/config/README.md
"""

TEMPLATE_COUNTER = """// SPDX-License-Identifier: UNLICENSED
pragma solidity ^0.8.13;

contract Counter {
    uint256 public number;
}
"""

TEMPLATE_COUNTER_TEST = """// SPDX-License-Identifier: UNLICENSED
pragma solidity ^0.8.13;

import {Test} from "forge-std/Test.sol";

contract CounterTest is Test {}
"""

# Stands in for the forge binary. `build` writes one artifact per source file,
# `test` prints forge-style result lines and drops a marker file.
FAKE_FORGE = """#!/bin/sh
if [ "$1" = "build" ]; then
    if [ -n "$FAKE_FORGE_BUILD_STDERR" ]; then
        echo "$FAKE_FORGE_BUILD_STDERR" >&2
    fi
    for f in src/*.sol; do
        n=$(basename "$f" .sol)
        mkdir -p "out/$n.sol"
        printf '%s' '{"abi":[{"type":"function","name":"get","inputs":[],"outputs":[],"stateMutability":"view"}],"bytecode":{"object":"0x6080604052"}}' > "out/$n.sol/$n.json"
    done
    echo "Compiler run successful!"
    exit 0
fi
if [ "$1" = "test" ]; then
    touch test-ran
    echo "Ran 2 tests for test/Foo.t.sol:FooTest"
    echo "[PASS] test_Increment() (gas: 31303)"
    echo "[FAIL: assertion failed] test_Broken() (gas: 8937)"
    echo "Suite result: FAILED. 1 passed; 1 failed; 0 skipped"
    exit 0
fi
echo "unknown command $1" >&2
exit 2
"""

FOO_CONTRACT = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

contract Foo {
    function get() public pure returns (uint256) {
        return 42;
    }
}
"""

FOO_TEST = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

import {Test} from "forge-std/Test.sol";
import {Foo} from "../src/Foo.sol";

contract FooTest is Test {
    function test_Increment() public {}
}
"""


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    root = tmp_path / "template"
    (root / "src").mkdir(parents=True)
    (root / "test").mkdir()
    (root / "lib" / "forge-std" / "src").mkdir(parents=True)
    (root / "foundry.toml").write_text(TEMPLATE_FOUNDRY_TOML)
    (root / "src" / "Counter.sol").write_text(TEMPLATE_COUNTER)
    (root / "test" / "Counter.t.sol").write_text(TEMPLATE_COUNTER_TEST)
    return root


@pytest.fixture
def temp_root(tmp_path: Path) -> Path:
    return tmp_path / "workspaces"


@pytest.fixture
def provisioner(template_dir: Path, temp_root: Path) -> WorkspaceProvisioner:
    return WorkspaceProvisioner(template_dir=template_dir, temp_root=temp_root)


@pytest.fixture
def fake_forge(tmp_path: Path) -> Path:
    if sys.platform == "win32":  # pragma: no cover
        pytest.skip("fake forge is a POSIX shell script")
    script = tmp_path / "bin" / "forge"
    script.parent.mkdir()
    script.write_text(FAKE_FORGE)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def config(template_dir: Path, temp_root: Path, fake_forge: Path) -> ForgeSandboxConfig:
    return ForgeSandboxConfig(
        template_dir=template_dir,
        temp_root=temp_root,
        forge_binary=str(fake_forge),
        build_timeout=30.0,
        test_timeout=30.0,
    )


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Any:
    monkeypatch.delenv("FAKE_FORGE_BUILD_STDERR", raising=False)
    return monkeypatch


@pytest.fixture
def foo_contract() -> str:
    return FOO_CONTRACT


@pytest.fixture
def foo_test() -> str:
    return FOO_TEST
