# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

import asyncio
import stat
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from forge_sandbox.exceptions import ToolchainError, ToolchainTimeout
from forge_sandbox.models import ToolchainOutput
from forge_sandbox.toolchain import ForgeRunner
from forge_sandbox.workspace import Workspace


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    root = tmp_path / "ws"
    root.mkdir()
    return Workspace(id="ws", root=root)


def _process(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> Any:
    process = MagicMock()
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    process.returncode = returncode
    process.pid = 4242
    return process


@pytest.fixture
def mock_exec() -> Any:
    with patch("forge_sandbox.toolchain.asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock:
        yield mock


@pytest.mark.asyncio
async def test_run_build_success(mock_exec: Any, workspace: Workspace) -> None:
    mock_exec.return_value = _process(stdout=b"Compiler run successful!\n")

    result = await ForgeRunner().run_build(workspace)

    assert isinstance(result, ToolchainOutput)
    assert result.stdout == "Compiler run successful!\n"
    assert result.stderr == ""
    assert result.exit_code == 0
    assert result.command == ["forge", "build"]

    args, kwargs = mock_exec.call_args
    assert args == ("forge", "build")
    assert kwargs["cwd"] == workspace.root
    assert kwargs["stdout"] == asyncio.subprocess.PIPE
    assert kwargs["stderr"] == asyncio.subprocess.PIPE


@pytest.mark.asyncio
async def test_run_test_uses_verbosity(mock_exec: Any, workspace: Workspace) -> None:
    mock_exec.return_value = _process(stdout=b"[PASS] test_A() (gas: 1)\n")

    result = await ForgeRunner(binary="/opt/foundry/bin/forge").run_test(workspace)

    assert result.command == ["/opt/foundry/bin/forge", "test", "-vv"]
    assert mock_exec.call_args.args == ("/opt/foundry/bin/forge", "test", "-vv")


@pytest.mark.asyncio
async def test_run_test_without_verbosity(mock_exec: Any, workspace: Workspace) -> None:
    mock_exec.return_value = _process()

    await ForgeRunner(test_verbosity="").run_test(workspace)

    assert mock_exec.call_args.args == ("forge", "test")


@pytest.mark.asyncio
async def test_stderr_is_fatal_even_on_exit_zero(mock_exec: Any, workspace: Workspace) -> None:
    mock_exec.return_value = _process(stdout=b"ok", stderr=b"Warning: unused variable", returncode=0)

    with pytest.raises(ToolchainError, match="Warning: unused variable") as exc_info:
        await ForgeRunner().run_build(workspace)

    assert exc_info.value.phase == "build"
    assert exc_info.value.exit_code == 0


@pytest.mark.asyncio
async def test_stderr_tolerated_when_not_strict(mock_exec: Any, workspace: Workspace) -> None:
    mock_exec.return_value = _process(stdout=b"ok", stderr=b"Warning: unused variable", returncode=0)

    result = await ForgeRunner(strict_stderr=False).run_build(workspace)

    assert result.stderr == "Warning: unused variable"


@pytest.mark.asyncio
async def test_nonzero_exit_is_fatal(mock_exec: Any, workspace: Workspace) -> None:
    mock_exec.return_value = _process(stdout=b"Error (2314): Expected ';'", returncode=1)

    with pytest.raises(ToolchainError, match="Expected ';'") as exc_info:
        await ForgeRunner(strict_stderr=False).run_test(workspace)

    assert exc_info.value.phase == "test"
    assert exc_info.value.exit_code == 1


@pytest.mark.asyncio
async def test_nonzero_exit_without_output(mock_exec: Any, workspace: Workspace) -> None:
    mock_exec.return_value = _process(returncode=3)

    with pytest.raises(ToolchainError, match="exited with code 3"):
        await ForgeRunner().run_build(workspace)


@pytest.mark.asyncio
async def test_missing_binary(mock_exec: Any, workspace: Workspace) -> None:
    mock_exec.side_effect = FileNotFoundError("No such file or directory: 'forge'")

    with pytest.raises(ToolchainError, match="Failed to start forge"):
        await ForgeRunner().run_build(workspace)


@pytest.mark.asyncio
async def test_timeout_kills_process(mock_exec: Any, workspace: Workspace) -> None:
    async def hang() -> tuple[bytes, bytes]:
        await asyncio.sleep(10)
        return b"", b""  # pragma: no cover

    process = _process()
    process.communicate = hang
    process.wait = AsyncMock(return_value=-9)
    mock_exec.return_value = process

    with pytest.raises(ToolchainTimeout, match="exceeded 0.05 seconds"):
        await ForgeRunner(build_timeout=0.05).run_build(workspace)

    process.kill.assert_called_once()
    process.wait.assert_awaited_once()


@pytest.mark.asyncio
async def test_timeout_is_a_toolchain_error(mock_exec: Any, workspace: Workspace) -> None:
    async def hang() -> tuple[bytes, bytes]:
        await asyncio.sleep(10)
        return b"", b""  # pragma: no cover

    process = _process()
    process.communicate = hang
    process.wait = AsyncMock(return_value=-9)
    mock_exec.return_value = process

    with pytest.raises(ToolchainError):
        await ForgeRunner(test_timeout=0.05).run_test(workspace)


@pytest.mark.asyncio
async def test_real_subprocess_with_fake_forge(fake_forge: Path, workspace: Workspace, clean_env: Any) -> None:
    (workspace.root / "src").mkdir()
    (workspace.root / "src" / "Foo.sol").write_text("contract Foo {}")
    runner = ForgeRunner(binary=str(fake_forge))

    build = await runner.run_build(workspace)
    test = await runner.run_test(workspace)

    assert "Compiler run successful!" in build.stdout
    assert (workspace.root / "out" / "Foo.sol" / "Foo.json").exists()
    assert "[PASS] test_Increment()" in test.stdout
    assert (workspace.root / "test-ran").exists()
    assert build.duration >= 0


@pytest.mark.asyncio
async def test_real_subprocess_timeout(tmp_path: Path, workspace: Workspace) -> None:
    script = tmp_path / "slow-forge"
    script.write_text("#!/bin/sh\nexec sleep 30\n")
    script.chmod(script.stat().st_mode | stat.S_IXUSR)

    with pytest.raises(ToolchainTimeout):
        await ForgeRunner(binary=str(script), build_timeout=0.2).run_build(workspace)
