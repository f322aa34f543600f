"""Rank agents by how well their capability tags fit a task description.

Keywords are pulled from the free-text description and compared against each
agent's capabilities by substring containment, or by membership in the same
synonym group. The base score is the share of keywords covered by matching
capabilities (capped at 1.0); availability and experience add small bonuses.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..constants import (
    DEFAULT_AVAILABILITY_WEIGHT,
    DEFAULT_EXPERIENCE_WEIGHT,
    DEFAULT_MATCH_LIMIT,
)
from .models import AgentProfile, MatchResult

CAPABILITY_SYNONYMS: Dict[str, List[str]] = {
    "code": ["coding", "programming", "development", "software", "developer"],
    "write": ["writing", "content", "copywriting", "author", "documentation"],
    "analyze": ["analysis", "analytics", "data", "research", "investigate"],
    "design": ["designing", "ui", "ux", "graphic", "visual", "creative"],
    "communicate": ["communication", "email", "messaging", "outreach", "correspondence"],
    "automate": ["automation", "scripting", "workflow", "bot"],
    "search": ["searching", "research", "find", "lookup", "query"],
    "organize": ["organization", "manage", "schedule", "planning", "coordinate"],
    "translate": ["translation", "language", "localize", "i18n"],
    "summarize": ["summary", "digest", "brief", "overview", "recap"],
}

STOP_WORDS = frozenset(
    """
    the a an and or but in on at to for of with by from as is was are were been
    be have has had do does did will would could should may might must shall
    can need this that these those i me my we our you your it its they them
    their what which who whom where when why how all each every both few more
    most some any no not only just also very
    """.split()
)

AVAILABILITY_FACTORS: Dict[str, float] = {
    "online": 1.0,
    "busy": 0.5,
    "away": 0.25,
    "offline": 0.0,
}

REASON_SEPARATOR = " • "
NO_KEYWORDS_REASON = "No specific requirements - any agent can help"

_PUNCTUATION_RE = re.compile(r"[^\w\s]")


def extract_keywords(text: str) -> List[str]:
    """Return candidate keywords from ``text`` in order, duplicates included."""
    words = _PUNCTUATION_RE.sub(" ", text.lower()).split()
    return [w for w in words if len(w) > 2 and w not in STOP_WORDS]


def _synonym_terms() -> Iterable[Tuple[str, List[str]]]:
    for root, synonyms in CAPABILITY_SYNONYMS.items():
        yield root, [root, *synonyms]


def capability_matches(capability: str, keyword: str) -> bool:
    """True if one string contains the other or both fall in one synonym group."""
    cap = capability.lower()
    key = keyword.lower()

    if key in cap or cap in key:
        return True

    for _, terms in _synonym_terms():
        if any(t in cap for t in terms) and any(t in key for t in terms):
            return True
    return False


def calculate_match_score(
    keywords: Sequence[str], capabilities: Sequence[str]
) -> Tuple[float, List[str]]:
    """Return ``(score, matched_capabilities)``; the score is in ``[0, 1]``."""
    matched: List[str] = []
    for capability in capabilities:
        if capability in matched:
            continue
        if any(capability_matches(capability, keyword) for keyword in keywords):
            matched.append(capability)

    if not keywords:
        return 0.0, matched
    return min(len(matched) / len(keywords), 1.0), matched


def _reason(agent: AgentProfile, matched: Sequence[str]) -> str:
    reasons: List[str] = []
    if matched:
        reasons.append(f"Matches: {', '.join(matched)}")
    if agent.availability == "online":
        reasons.append("Online")
    if agent.total_tasks_completed > 10:
        reasons.append(f"Experienced ({agent.total_tasks_completed} tasks)")
    return REASON_SEPARATOR.join(reasons) if reasons else "General match"


def match_agents_to_task(
    task_description: str,
    agents: Sequence[AgentProfile],
    online_only: bool = False,
    min_score: float = 0.0,
    limit: int = DEFAULT_MATCH_LIMIT,
    availability_weight: float = DEFAULT_AVAILABILITY_WEIGHT,
    experience_weight: float = DEFAULT_EXPERIENCE_WEIGHT,
) -> List[MatchResult]:
    """Rank ``agents`` for ``task_description``, best first.

    When the description yields no keywords every (optionally online-only)
    agent is returned in input order with a score of 0.
    """
    keywords = extract_keywords(task_description)
    candidates = [a for a in agents if not online_only or a.availability == "online"]

    if not keywords:
        return [
            MatchResult(
                agent=agent,
                score=0.0,
                availability_bonus=(
                    availability_weight if agent.availability == "online" else 0.0
                ),
                reason=NO_KEYWORDS_REASON,
            )
            for agent in candidates[:limit]
        ]

    results: List[MatchResult] = []
    for agent in candidates:
        base_score, matched = calculate_match_score(keywords, agent.capabilities)
        availability_bonus = (
            AVAILABILITY_FACTORS.get(agent.availability, 0.0) * availability_weight
        )
        experience_bonus = (
            min(agent.total_tasks_completed / 100, 1) * experience_weight
            if agent.total_tasks_completed
            else 0.0
        )
        total = base_score + availability_bonus + experience_bonus
        if total < min_score:
            continue

        results.append(
            MatchResult(
                agent=agent,
                score=total,
                matched_capabilities=matched,
                availability_bonus=availability_bonus,
                experience_bonus=experience_bonus,
                reason=_reason(agent, matched),
            )
        )

    # sorted() is stable, so equal scores keep their input order
    results = sorted(results, key=lambda r: r.score, reverse=True)
    return results[:limit]


def match_task_to_agents(
    task_description: str,
    agents: Sequence[AgentProfile],
    require_online: bool = False,
    max_results: int = DEFAULT_MATCH_LIMIT,
    prefer_experienced: bool = False,
) -> List[MatchResult]:
    """Variant of :func:`match_agents_to_task` with caller-oriented options."""
    return match_agents_to_task(
        task_description,
        agents,
        online_only=require_online,
        limit=max_results,
        experience_weight=0.1 if prefer_experienced else DEFAULT_EXPERIENCE_WEIGHT,
    )


def find_best_agent(
    task_description: str, agents: Sequence[AgentProfile], online_only: bool = True
) -> Optional[MatchResult]:
    results = match_agents_to_task(
        task_description, agents, online_only=online_only, limit=1
    )
    return results[0] if results else None


def suggest_capabilities(task_description: str) -> List[str]:
    """Suggest capability tags for a task: synonym roots plus longer keywords."""
    suggestions: Dict[str, None] = {}
    for keyword in extract_keywords(task_description):
        for root, terms in _synonym_terms():
            if any(keyword in t or t in keyword for t in terms):
                suggestions[root] = None
        if len(keyword) > 3:
            suggestions[keyword] = None
    return list(suggestions)
