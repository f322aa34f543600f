"""Agent/task skill matching."""

from __future__ import annotations

from .matcher import (
    CAPABILITY_SYNONYMS,
    calculate_match_score,
    capability_matches,
    extract_keywords,
    find_best_agent,
    match_agents_to_task,
    match_task_to_agents,
    suggest_capabilities,
)
from .models import AgentProfile, Availability, MatchResult

__all__ = [
    "AgentProfile",
    "Availability",
    "CAPABILITY_SYNONYMS",
    "MatchResult",
    "calculate_match_score",
    "capability_matches",
    "extract_keywords",
    "find_best_agent",
    "match_agents_to_task",
    "match_task_to_agents",
    "suggest_capabilities",
]
