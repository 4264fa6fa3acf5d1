"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="mantra-helpdesk", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/mantra",
        description="PostgreSQL connection URL (async)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== Helpdesk Rules ==========
    rules_config_path: Path = Field(
        default=Path("helpdesk_rules.yaml"),
        description="Path to helpdesk rules YAML file"
    )
    sla_refresh_interval: int = Field(
        default=60,
        description="Seconds between SLA sweeps (0 disables the job)",
        ge=0
    )
    display_timezone: str = Field(
        default="Asia/Kolkata",
        description="Timezone used when rendering dates for people"
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class TicketStatus(str, Enum):
    """Ticket lifecycle statuses."""
    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class SLAClassification(str, Enum):
    """SLA state of a ticket as seen by the SLA clock."""
    NOT_SET = "not_set"
    ON_TRACK = "on_track"
    OVERDUE = "overdue"
    RESOLVED_ON_TIME = "resolved_on_time"
    RESOLVED_LATE = "resolved_late"


class AuditActionKind(str, Enum):
    """Audit log actions with a known payload."""
    STATUS_CHANGED = "status_changed"
    REASSIGNED = "reassigned"
    MARKED_L3 = "marked_l3"
    UNMARKED_L3 = "unmarked_l3"


class UserRole(str, Enum):
    """Roles stored in the `roles` table."""
    ADMIN = "admin"
    LEAD = "lead"
    AGENT = "agent"
    USER = "user"


class TimelineItemKind(str, Enum):
    """Kinds of entries in a ticket activity timeline."""
    COMMENT = "comment"
    AUDIT = "audit"


# ========== Lists for validation ==========

CLOSED_STATUSES = (TicketStatus.RESOLVED, TicketStatus.CLOSED)
MERGEABLE_AUDIT_ACTIONS = frozenset(a.value for a in AuditActionKind)
STATUS_MANAGER_ROLES = (UserRole.ADMIN, UserRole.LEAD)
