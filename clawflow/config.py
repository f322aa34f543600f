from __future__ import annotations

import os
from typing import Optional, Literal

import yaml
from pydantic import BaseModel

from .constants import (
    DEFAULT_AVAILABILITY_WEIGHT,
    DEFAULT_EXPERIENCE_WEIGHT,
    DEFAULT_MATCH_LIMIT,
    DEFAULT_MAX_STEP_EXECUTIONS,
)


class DispatchConfig(BaseModel):
    """Configuration for the agent dispatch channel."""

    backend: Literal["simulated", "http"] = "simulated"
    gateway_url: Optional[str] = None
    api_key: Optional[str] = None
    max_retries: int = 2


class ExecutorConfig(BaseModel):
    """Run driver settings."""

    max_step_executions: int = DEFAULT_MAX_STEP_EXECUTIONS
    webhook_timeout_s: float = 30.0


class MatcherConfig(BaseModel):
    """Default weights for agent/task matching."""

    availability_weight: float = DEFAULT_AVAILABILITY_WEIGHT
    experience_weight: float = DEFAULT_EXPERIENCE_WEIGHT
    limit: int = DEFAULT_MATCH_LIMIT


class ClawflowConfig(BaseModel):
    """Top-level configuration model."""

    database_url: Optional[str] = None
    dispatch: DispatchConfig = DispatchConfig()
    executor: ExecutorConfig = ExecutorConfig()
    matcher: MatcherConfig = MatcherConfig()


def load_config(path: Optional[str] = None) -> ClawflowConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to CLAWFLOW_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("CLAWFLOW_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = ClawflowConfig(**data)
    else:
        config = ClawflowConfig()

    env_db_url = os.getenv("CLAWFLOW_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    return config
