# upgrade_proxy/models/version.py
from pydantic import BaseModel, Field
from typing import Any, Literal, Optional


class VersionQuery(BaseModel):
    major: str
    minor: Optional[str] = None


class ErrorEnvelope(BaseModel):
    error: str
    details: str
    response: Optional[Any] = None
    version: Optional[str] = None  # only set for major+minor lookups

    def to_content(self) -> dict:
        content = {"error": self.error, "details": self.details}
        if self.response is not None:
            content["response"] = self.response
        if self.version is not None:
            content["version"] = self.version
        return content


class PhpRequirement(BaseModel):
    min: str = "Unknown"
    max: str = "Unknown"


class Requirements(BaseModel):
    php: PhpRequirement = Field(default_factory=PhpRequirement)
    mysql: str = "Unknown"
    composer: str = "2.0+"  # not provided by the API


class SupportWindow(BaseModel):
    active_until: str = "Unknown"
    security_until: str = "Unknown"


class VersionSummary(BaseModel):
    version: str
    type: Literal["lts", "sts", "dev", "regular"] = "regular"
    release_date: str = "Unknown"
    support: SupportWindow = Field(default_factory=SupportWindow)
    requirements: Requirements = Field(default_factory=Requirements)
    db_changes: bool = False
    install_tool_migrations: bool = False
