# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

import shutil
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Literal
from uuid import uuid4

import anyio

from forge_sandbox.exceptions import ProvisionError
from forge_sandbox.remappings import (
    DEFAULT_REMAPPINGS,
    FOUNDRY_TOML,
    REMAPPINGS_FILE,
    Remapping,
    apply_to_foundry_toml,
    parse_remappings_txt,
    read_toml_remappings,
    render_remappings_txt,
    validate_order,
)
from forge_sandbox.utils.logger import logger

RetentionPolicy = Literal["retain", "delete"]


@dataclass(frozen=True)
class Workspace:
    """An isolated Foundry project directory owned by a single request."""

    id: str
    root: Path

    @property
    def src_dir(self) -> Path:
        return self.root / "src"

    @property
    def test_dir(self) -> Path:
        return self.root / "test"

    @property
    def out_dir(self) -> Path:
        return self.root / "out"


class WorkspaceProvisioner:
    """Creates per-request workspaces by cloning a template project.

    Every workspace lives under ``temp_root`` in a directory named after a
    fresh uuid4, so concurrent requests never share one. What happens to the
    directory afterwards is decided by ``retention``.
    """

    def __init__(
        self,
        template_dir: Path,
        temp_root: Path,
        remappings: Sequence[Remapping] = DEFAULT_REMAPPINGS,
        retention: RetentionPolicy = "retain",
    ):
        """Initializes the WorkspaceProvisioner.

        Args:
            template_dir: Read-only Foundry project copied into each workspace.
            temp_root: Directory under which workspaces are created.
            remappings: Ordered remapping set written into each workspace.
            retention: ``retain`` keeps workspaces for inspection, ``delete``
                removes them when released.

        Raises:
            ValueError: If ``remappings`` lists a general prefix before a more specific one.
        """
        validate_order(remappings)
        self.template_dir = Path(template_dir)
        self.temp_root = Path(temp_root)
        self.remappings = tuple(remappings)
        self.retention = retention

    def provision(self) -> Workspace:
        """Copy the template into a new workspace and write its remappings.

        Returns:
            Workspace: The freshly created workspace.

        Raises:
            ProvisionError: If the template is missing or the copy or config write fails.
        """
        if not self.template_dir.is_dir():
            raise ProvisionError(f"Template directory not found: {self.template_dir}")

        workspace_id = uuid4().hex
        workspace = Workspace(id=workspace_id, root=self.temp_root / workspace_id)
        logger.info(f"Creating workspace at {workspace.root}", workspace_id=workspace.id)

        try:
            self.temp_root.mkdir(parents=True, exist_ok=True)
            shutil.copytree(self.template_dir, workspace.root)
        except OSError as e:
            logger.error(f"Failed to copy template into {workspace.root}: {e}")
            self.release(workspace)
            raise ProvisionError(f"Failed to create workspace {workspace.id}: {e}") from e

        try:
            self.write_remappings(workspace)
        except ProvisionError:
            self.release(workspace)
            raise
        return workspace

    def write_remappings(self, workspace: Workspace) -> None:
        """Write the remapping set to ``remappings.txt`` and ``foundry.toml``.

        Both files are read back afterwards and must list exactly the same
        remappings in the same order.

        Raises:
            ProvisionError: If either file cannot be read or written, or the two disagree.
        """
        txt_path = workspace.root / REMAPPINGS_FILE
        toml_path = workspace.root / FOUNDRY_TOML
        try:
            txt_path.write_text(render_remappings_txt(self.remappings), encoding="utf-8")
            content = toml_path.read_text(encoding="utf-8") if toml_path.exists() else ""
            toml_path.write_text(apply_to_foundry_toml(content, self.remappings), encoding="utf-8")

            written_txt = parse_remappings_txt(txt_path.read_text(encoding="utf-8"))
            written_toml = read_toml_remappings(toml_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write remappings in {workspace.root}: {e}")
            raise ProvisionError(f"Failed to write remappings for workspace {workspace.id}: {e}") from e

        expected = list(self.remappings)
        if written_txt != expected or written_toml != expected:
            logger.error(f"Remappings in {REMAPPINGS_FILE} and {FOUNDRY_TOML} disagree in {workspace.root}")
            raise ProvisionError(
                f"Remappings in {FOUNDRY_TOML} of workspace {workspace.id} do not match {REMAPPINGS_FILE}"
            )

        logger.debug("Remappings written", workspace_id=workspace.id, count=len(self.remappings))

    def release(self, workspace: Workspace) -> None:
        """Apply the retention policy to a workspace that is no longer in use."""
        if self.retention == "delete":
            logger.info(f"Deleting workspace {workspace.root}", workspace_id=workspace.id)
            shutil.rmtree(workspace.root, ignore_errors=True)
        else:
            logger.info(f"Workspace preserved at: {workspace.root}", workspace_id=workspace.id)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Workspace]:
        """Provision a workspace for the duration of the ``async with`` block.

        The workspace is released on exit whether or not the block raised.
        Filesystem work runs on a worker thread.
        """
        workspace = await anyio.to_thread.run_sync(self.provision)
        try:
            yield workspace
        finally:
            await anyio.to_thread.run_sync(self.release, workspace)
