# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

"""Data models for parsed test results and deploy artifacts."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer


class TestRecord(BaseModel):
    """A single test line reported by ``forge test``."""

    __test__ = False

    model_config = ConfigDict(populate_by_name=True)

    name: str
    status: Literal["passed", "failed"]
    message: str
    gas_used: int | None = Field(default=None, alias="gasUsed")

    @model_serializer(mode="wrap")
    def _drop_missing_gas(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        for key in ("gas_used", "gasUsed"):
            if key in data and data[key] is None:
                del data[key]
        return data


class TestSuiteResult(BaseModel):
    """The tests of one submitted contract."""

    __test__ = False

    name: str
    tests: list[TestRecord]


class DeployArtifact(BaseModel):
    """
    Compiled output of one contract, as needed for client-side deployment.
    """

    contract_name: str
    abi: list[dict[str, Any]]
    bytecode: str
