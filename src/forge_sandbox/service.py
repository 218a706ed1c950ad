# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

import anyio

from forge_sandbox.config import ForgeSandboxConfig
from forge_sandbox.exceptions import ValidationError
from forge_sandbox.extractor import group_results, load_artifact, parse_test_output
from forge_sandbox.injector import inject
from forge_sandbox.models import CompileAndTestResponse, CompileForDeployResponse
from forge_sandbox.remappings import parse_remapping
from forge_sandbox.toolchain import ForgeRunner
from forge_sandbox.utils.logger import logger
from forge_sandbox.workspace import WorkspaceProvisioner


class ForgeSandboxAsync:
    """Async-native build and test service (The Core).

    Each call provisions its own workspace, injects the submission, runs
    forge and extracts the result. Calls share nothing but the workspace
    root directory, so they may run concurrently.
    """

    def __init__(
        self,
        config: ForgeSandboxConfig | None = None,
        provisioner: WorkspaceProvisioner | None = None,
        runner: ForgeRunner | None = None,
    ):
        """Initializes the ForgeSandboxAsync service.

        Args:
            config: Configuration for the service.
            provisioner: Optional provisioner overriding the one built from config.
            runner: Optional forge runner overriding the one built from config.
        """
        self.config = config or ForgeSandboxConfig()
        self.provisioner = provisioner or WorkspaceProvisioner(
            template_dir=self.config.template_dir,
            temp_root=self.config.temp_root,
            remappings=[parse_remapping(entry) for entry in self.config.remappings],
            retention=self.config.retention,
        )
        self.runner = runner or ForgeRunner(
            binary=self.config.forge_binary,
            build_timeout=self.config.build_timeout,
            test_timeout=self.config.test_timeout,
            strict_stderr=self.config.strict_stderr,
            test_verbosity=self.config.test_verbosity,
        )

    async def compile_and_test(self, code: str | None, test_code: str | None) -> CompileAndTestResponse:
        """Build a contract with its tests and report each test's outcome.

        Args:
            code: Solidity source of the contract.
            test_code: Solidity source of its forge tests.

        Returns:
            CompileAndTestResponse: Build and test output plus parsed results.

        Raises:
            ValidationError: If either source is missing. No workspace is created.
            ProvisionError: If the workspace cannot be prepared.
            ToolchainError: If the build or test phase fails.
        """
        if not code or not test_code:
            raise ValidationError("Missing contract or test code")

        async with self.provisioner.acquire() as workspace:
            contract_name = await anyio.to_thread.run_sync(inject, workspace, code, test_code)

            logger.info("Compiling contract...", workspace_id=workspace.id, contract=contract_name)
            build = await self.runner.run_build(workspace)

            logger.info("Running tests...", workspace_id=workspace.id, contract=contract_name)
            test = await self.runner.run_test(workspace)

        tests = parse_test_output(test.stdout)
        logger.info(
            f"Parsed {len(tests)} test results",
            contract=contract_name,
            failed=sum(1 for t in tests if t.status == "failed"),
        )
        return CompileAndTestResponse(
            compile_out=build.stdout,
            test_out=test.stdout,
            results=group_results(contract_name, tests),
        )

    async def compile_for_deploy(self, code: str | None) -> CompileForDeployResponse:
        """Build a contract and return its ABI and creation bytecode.

        Args:
            code: Solidity source of the contract.

        Returns:
            CompileForDeployResponse: The artifact and build output.

        Raises:
            ValidationError: If the source is missing. No workspace is created.
            ProvisionError: If the workspace cannot be prepared.
            ToolchainError: If the build fails.
            ArtifactNotFound: If forge produced no artifact for the contract.
        """
        if not code:
            raise ValidationError("Missing contract code")

        async with self.provisioner.acquire() as workspace:
            contract_name = await anyio.to_thread.run_sync(inject, workspace, code)

            logger.info("Compiling contract for deployment...", workspace_id=workspace.id, contract=contract_name)
            build = await self.runner.run_build(workspace)

            artifact = await anyio.to_thread.run_sync(load_artifact, workspace.out_dir, contract_name)

        return CompileForDeployResponse(
            contract_name=artifact.contract_name,
            abi=artifact.abi,
            bytecode=artifact.bytecode,
            compile_out=build.stdout,
        )


class ForgeSandbox:
    """Sync Facade for ForgeSandboxAsync (The Facade).

    Wraps ForgeSandboxAsync and executes methods via anyio.run.
    """

    def __init__(self, config: ForgeSandboxConfig | None = None):
        self._async = ForgeSandboxAsync(config)

    def compile_and_test(self, code: str | None, test_code: str | None) -> CompileAndTestResponse:
        return anyio.run(self._async.compile_and_test, code, test_code)

    def compile_for_deploy(self, code: str | None) -> CompileForDeployResponse:
        return anyio.run(self._async.compile_for_deploy, code)
