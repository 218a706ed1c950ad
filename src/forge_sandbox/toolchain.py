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
import time

from forge_sandbox.exceptions import ToolchainError, ToolchainTimeout
from forge_sandbox.models import ToolchainOutput
from forge_sandbox.utils.logger import logger
from forge_sandbox.workspace import Workspace


class ForgeRunner:
    """
    Runs ``forge build`` and ``forge test`` as child processes inside a workspace.
    """

    def __init__(
        self,
        binary: str = "forge",
        build_timeout: float | None = 300.0,
        test_timeout: float | None = 300.0,
        strict_stderr: bool = True,
        test_verbosity: str = "-vv",
    ):
        self.binary = binary
        self.build_timeout = build_timeout
        self.test_timeout = test_timeout
        self.strict_stderr = strict_stderr
        self.test_verbosity = test_verbosity

    async def run_build(self, workspace: Workspace) -> ToolchainOutput:
        """Compile the workspace project.

        Raises:
            ToolchainError: If forge fails or writes to stderr.
            ToolchainTimeout: If the build exceeds ``build_timeout``.
        """
        return await self._run([self.binary, "build"], workspace, "build", self.build_timeout)

    async def run_test(self, workspace: Workspace) -> ToolchainOutput:
        """Run the workspace test suite.

        Raises:
            ToolchainError: If forge fails or writes to stderr.
            ToolchainTimeout: If the run exceeds ``test_timeout``.
        """
        cmd = [self.binary, "test"]
        if self.test_verbosity:
            cmd.append(self.test_verbosity)
        return await self._run(cmd, workspace, "test", self.test_timeout)

    async def _run(
        self, cmd: list[str], workspace: Workspace, phase: str, timeout: float | None
    ) -> ToolchainOutput:
        logger.info(f"Running {' '.join(cmd)}", workspace_id=workspace.id, phase=phase)

        start_time = time.time()
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=workspace.root,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Failed to start {cmd[0]}: {e}")
            raise ToolchainError(f"Failed to start {cmd[0]}: {e}", phase=phase) from e

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"forge {phase} timed out ({timeout}s). Killing process {process.pid}.")
            process.kill()
            await process.wait()
            raise ToolchainTimeout(f"forge {phase} exceeded {timeout} seconds limit.", phase=phase) from e

        duration = time.time() - start_time
        result = ToolchainOutput(
            command=cmd,
            stdout=stdout_bytes.decode("utf-8", errors="replace") if stdout_bytes else "",
            stderr=stderr_bytes.decode("utf-8", errors="replace") if stderr_bytes else "",
            exit_code=process.returncode if process.returncode is not None else -1,
            duration=duration,
        )
        self._check(result, phase)
        logger.info(f"forge {phase} finished in {duration:.2f}s", workspace_id=workspace.id)
        return result

    def _check(self, result: ToolchainOutput, phase: str) -> None:
        """Raise ToolchainError when the policy considers the run failed."""
        if self.strict_stderr and result.stderr:
            logger.error(f"forge {phase} wrote to stderr (exit code {result.exit_code})")
            raise ToolchainError(result.stderr, phase=phase, exit_code=result.exit_code)

        if result.exit_code != 0:
            message = result.stderr or result.stdout or f"forge {phase} exited with code {result.exit_code}"
            logger.error(f"forge {phase} exited with code {result.exit_code}")
            raise ToolchainError(message, phase=phase, exit_code=result.exit_code)
