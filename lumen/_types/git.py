from typing import Union

from pydantic import BaseModel, ConfigDict


class GitCommit(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash: str
    author_name: str
    author_email: str
    date: str
    message: str
    diff: str

    @property
    def patch(self) -> str:
        return self.diff

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    def describe(self) -> str:
        return f"commit {self.short_hash}"


class GitDiff(BaseModel):
    model_config = ConfigDict(frozen=True)

    diff: str
    staged: bool = False

    @property
    def patch(self) -> str:
        return self.diff

    def describe(self) -> str:
        return "staged changes" if self.staged else "working tree changes"


GitEntity = Union[GitCommit, GitDiff]


class CommitSummary(BaseModel):
    """One row of the commit picker."""

    model_config = ConfigDict(frozen=True)

    hash: str
    author_name: str
    relative_date: str
    subject: str

    @property
    def short_hash(self) -> str:
        return self.hash[:7]
