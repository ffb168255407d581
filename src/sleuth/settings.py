"""Environment-backed settings.

Settings are read once, at the edge of the program, and passed into the
runtime builder. Library classes also fall back to the same environment
variables, so they remain usable without a Settings object.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from sleuth.llm.errors import LLMConfigError

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Credentials and endpoints for every collaborator.

    Only ``openai_api_key`` is required to run research. Missing
    collaborator keys disable the matching tools.
    """

    model_config = ConfigDict(frozen=True)

    openai_api_key: str = ""
    openai_base_url: Optional[str] = None
    model: Optional[str] = None
    gemini_api_key: str = ""
    gemini_model: Optional[str] = None
    serper_api_key: str = ""
    jina_api_key: str = ""
    memory_path: Path = Path("memory.json")

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> Settings:
        """Build settings from the environment after loading ``.env``.

        Variables already present in the environment win over the file.
        """
        loaded = load_dotenv(env_file) if env_file else load_dotenv()
        if loaded:
            logger.debug("Loaded environment from %s", env_file or ".env")

        env = os.environ
        return cls(
            openai_api_key=env.get("SLEUTH_OPENAI_API_KEY", ""),
            openai_base_url=env.get("SLEUTH_OPENAI_BASE_URL") or None,
            model=env.get("SLEUTH_MODEL") or None,
            gemini_api_key=env.get("GEMINI_API_KEY", ""),
            gemini_model=env.get("SLEUTH_GEMINI_MODEL") or None,
            serper_api_key=env.get("SERPER_API_KEY", ""),
            jina_api_key=env.get("JINA_API_KEY", ""),
            memory_path=Path(env.get("SLEUTH_MEMORY_PATH") or "memory.json"),
        )

    def require_engine(self) -> None:
        """Raise LLMConfigError unless the reasoning engine key is set."""
        if not self.openai_api_key:
            raise LLMConfigError(
                "SLEUTH_OPENAI_API_KEY is not set. Add it to the environment or .env."
            )

    def missing_optional(self) -> list[str]:
        """Names of unset collaborator keys, for a startup warning."""
        missing = []
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if not self.serper_api_key:
            missing.append("SERPER_API_KEY")
        return missing
