"""Typed GitHub GraphQL payloads."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RepoRef(BaseModel):
    """One team repository as returned by the GraphQL API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    url: str
    ssh_url: str = Field(alias="sshUrl")
    default_branch: str = Field(default="main", alias="defaultBranchRef")
    is_archived: bool = Field(default=False, alias="isArchived")

    @field_validator("default_branch", mode="before")
    @classmethod
    def unwrap_branch_ref(cls, v: Any) -> Any:
        # defaultBranchRef is {"name": ...}, or null for an empty repository
        if v is None:
            return "main"
        if isinstance(v, dict):
            return v.get("name")
        return v


class _PageInfo(BaseModel):
    has_next_page: bool = Field(default=False, alias="hasNextPage")
    end_cursor: str | None = Field(default=None, alias="endCursor")


class _RepositoryNodes(BaseModel):
    nodes: list[RepoRef]
    page_info: _PageInfo = Field(default_factory=_PageInfo, alias="pageInfo")


class _Team(BaseModel):
    repositories: _RepositoryNodes


class _Organization(BaseModel):
    team: _Team | None


class TeamRepositoriesData(BaseModel):
    """``data`` of the team repositories query."""

    organization: _Organization | None


class SingleRepositoryData(BaseModel):
    """``data`` of the single repository query."""

    repository: RepoRef | None
