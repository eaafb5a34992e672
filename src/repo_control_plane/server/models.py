"""Pydantic models for the REST server."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ApiTemplate(BaseModel):
    id: str
    name: str
    version: str
    language: str
    deployTarget: str
    description: str
    secrets: list[str]
    files: list[str]


class ScaffoldRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    templateId: str | None = None
    private: bool = True
    organization: str | None = None


class ScaffoldResponse(BaseModel):
    repoUrl: str
    fullName: str
    templateId: str
    templateVersion: str
    fallbackTemplate: bool
    files: list[str]
    registryEntry: dict[str, object]
    deployCommands: list[str]
    verifySteps: list[str]


class EnvironmentRequest(BaseModel):
    slug: str = Field(min_length=1)
    description: str = ""
    baseBranch: str = "main"
    repository: str | None = None
    issueNumber: int | None = Field(default=None, gt=0)


class EnvironmentResponse(BaseModel):
    branch: str
    files: list[str]
    issueComment: str
    commented: bool = False
