from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import yaml
from pydantic import BaseModel, Field, ValidationError
from src.jittools.retrieval.config import JITToolConfig
from src.jittools.retrieval.models import ToolCategory, ToolSpec
from src.utils.logger import get_logger

logger = get_logger("config")


class ToolEntry(BaseModel):
    """A tool as declared in the YAML catalog."""
    id: str
    name: Optional[str] = None
    description: str = ""
    category: ToolCategory = ToolCategory.CUSTOM
    capabilities: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    permissions: list[str] = Field(default_factory=list)
    priority: int = Field(default=50, ge=0, le=100)
    token_cost: int = Field(default=100, ge=0)
    deprecated: bool = False
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_spec(self) -> ToolSpec:
        return ToolSpec(
            id=self.id,
            name=self.name or self.id,
            description=self.description,
            category=self.category,
            capabilities=list(self.capabilities),
            keywords=list(self.keywords),
            permissions=list(self.permissions),
            priority=self.priority,
            token_cost=self.token_cost,
            deprecated=self.deprecated,
            updated_at=self.updated_at,
        )


class JITToolsFile(BaseModel):
    retrieval: JITToolConfig = Field(default_factory=JITToolConfig)
    tools: list[ToolEntry] = Field(default_factory=list)


def load_config(path: Path) -> JITToolsFile:
    """Load YAML config from path. Returns defaults if the file doesn't exist or is invalid."""
    if not path.exists():
        return JITToolsFile()
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return JITToolsFile.model_validate(raw)
    except yaml.YAMLError as e:
        logger.error(f"❌ Invalid YAML in {path}: {e}")
        return JITToolsFile()
    except (ValidationError, TypeError, ValueError) as e:
        logger.error(f"❌ Invalid config schema at {path}: {e}")
        return JITToolsFile()


def save_config(config: JITToolsFile, path: Path) -> None:
    """Save config to YAML file, creating parent dirs as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(
            config.model_dump(mode="json", exclude_none=True),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
