"""Runtime settings for fetching design documents and default values."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Settings shared by the API and CLI. CLI flags override these."""
    api_base: str = "https://api.figma.com"
    token: Optional[str] = None
    timeout_seconds: float = Field(30, gt=0)
    plan_type: str = "MEDICAL"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from FORMSMITH_* variables and FIGMA_TOKEN."""
        env = os.environ if environ is None else environ
        values = {}
        if env.get("FORMSMITH_API_BASE"):
            values["api_base"] = env["FORMSMITH_API_BASE"].rstrip("/")
        if env.get("FIGMA_TOKEN"):
            values["token"] = env["FIGMA_TOKEN"]
        if env.get("FORMSMITH_TIMEOUT"):
            values["timeout_seconds"] = env["FORMSMITH_TIMEOUT"]
        if env.get("FORMSMITH_PLAN_TYPE"):
            values["plan_type"] = env["FORMSMITH_PLAN_TYPE"]
        return cls(**values)
