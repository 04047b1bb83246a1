from __future__ import annotations
from pathlib import Path
from typing import List, Literal, Optional
from pydantic import BaseModel, Field
import yaml

class DBConfig(BaseModel):
    path: str = "data/comments.db"
    journal_mode: Literal["DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"] = "WAL"
    synchronous: Literal["OFF", "NORMAL", "FULL", "EXTRA"] = "NORMAL"
    busy_timeout_ms: int = 5000

class DedupeConfig(BaseModel):
    statuses: List[str] = Field(default_factory=lambda: ["1"])
    batch_size: int = 100
    max_batches: Optional[int] = None  # None = run until completed

class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[str] = None
    rotation: str = "10 MB"
    retention: str = "1 week"

class ResponseConfig(BaseModel):
    # Older front-ends read "deleted" instead of "trashed"
    legacy_deleted_field: bool = True

class AppConfig(BaseModel):
    db: DBConfig = Field(default_factory=DBConfig)
    dedupe: DedupeConfig = Field(default_factory=DedupeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    response: ResponseConfig = Field(default_factory=ResponseConfig)

def load_config(path: Path) -> AppConfig:
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    return AppConfig(**data)
