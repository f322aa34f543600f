"""Agent dispatch channels used by ``agent_call`` steps.

The executor only knows the ``BaseAgentDispatcher`` contract: send a message
to an (optional) agent and session, get a textual reply back, or an
``AgentDispatchError``. Routing, retries and transport belong to the
concrete dispatcher.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import httpx

from .config import ClawflowConfig, load_config
from .constants import DEFAULT_AGENT_TIMEOUT_MS
from .exceptions import AgentDispatchError
from .utils.retry import schedule_retry

if TYPE_CHECKING:
    from pydantic_ai import Agent

logger = logging.getLogger(__name__)


class BaseAgentDispatcher(metaclass=abc.ABCMeta):
    """Abstract request/response channel to an agent runtime."""

    @abc.abstractmethod
    async def send(
        self,
        agent_id: Optional[str],
        session_key: Optional[str],
        message: str,
        timeout_ms: int = DEFAULT_AGENT_TIMEOUT_MS,
    ) -> str:
        """Deliver ``message`` and return the agent's reply.

        Raises:
            AgentDispatchError: If the call fails or exceeds ``timeout_ms``.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release resources held by the dispatcher (no-op by default)."""
        pass


class SimulatedAgentDispatcher(BaseAgentDispatcher):
    """Echoes a canned reply without contacting any runtime."""

    def __init__(self) -> None:
        self.sent: List[Dict[str, Any]] = []

    async def send(
        self,
        agent_id: Optional[str],
        session_key: Optional[str],
        message: str,
        timeout_ms: int = DEFAULT_AGENT_TIMEOUT_MS,
    ) -> str:
        logger.info(f"Simulated agent call to {agent_id or '<default>'}: {message}")
        self.sent.append(
            {"agent_id": agent_id, "session_key": session_key, "message": message}
        )
        return f"[Simulated agent response to: {message}]"


class HttpAgentDispatcher(BaseAgentDispatcher):
    """Posts messages to an agent gateway over HTTP.

    Transport errors, timeouts and 5xx responses are retried up to
    ``max_retries`` times with exponential backoff. The gateway is expected to
    answer with JSON ``{"response": "..."}``; any other body is returned as
    text.
    """

    def __init__(
        self,
        gateway_url: str,
        api_key: Optional[str] = None,
        max_retries: int = 2,
        client: Optional[httpx.AsyncClient] = None,
        backoff_base: float = 1.5,
    ) -> None:
        self.gateway_url = gateway_url
        self.api_key = api_key
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        agent_id: Optional[str],
        session_key: Optional[str],
        message: str,
        timeout_ms: int = DEFAULT_AGENT_TIMEOUT_MS,
    ) -> str:
        attempt = 0
        while True:
            try:
                return await self._send_once(agent_id, session_key, message, timeout_ms)
            except AgentDispatchError as exc:
                if not exc.retryable or attempt >= self.max_retries:
                    raise
                attempt += 1
                logger.warning(
                    f"Agent dispatch to {agent_id or '<default>'} failed ({exc}); "
                    f"retry {attempt}/{self.max_retries}"
                )
                await schedule_retry(attempt, base=self.backoff_base, jitter=0)

    async def _send_once(
        self,
        agent_id: Optional[str],
        session_key: Optional[str],
        message: str,
        timeout_ms: int,
    ) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        payload = {"agent_id": agent_id, "session_key": session_key, "message": message}

        try:
            response = await self._get_client().post(
                self.gateway_url,
                json=payload,
                headers=headers,
                timeout=timeout_ms / 1000,
            )
        except httpx.TimeoutException as exc:
            raise AgentDispatchError(
                f"Agent call timed out after {timeout_ms}ms", retryable=True
            ) from exc
        except httpx.TransportError as exc:
            raise AgentDispatchError(f"Agent call failed: {exc}", retryable=True) from exc

        if response.status_code >= 400:
            raise AgentDispatchError(
                f"Agent gateway returned HTTP {response.status_code}",
                retryable=response.status_code >= 500,
            )

        try:
            data = response.json()
        except ValueError:
            return response.text
        if isinstance(data, dict) and "response" in data:
            return str(data["response"])
        return response.text


class PydanticAIAgentDispatcher(BaseAgentDispatcher):
    """Runs registered pydantic-ai agents in-process.

    Conversation history is kept per ``session_key`` so consecutive calls on
    the same session see earlier turns.
    """

    def __init__(
        self, agents: Dict[str, "Agent"], default_agent_id: Optional[str] = None
    ) -> None:
        self._agents = dict(agents)
        self._default_agent_id = default_agent_id
        self._histories: Dict[str, list] = {}

    def register(self, agent_id: str, agent: "Agent") -> None:
        self._agents[agent_id] = agent

    async def send(
        self,
        agent_id: Optional[str],
        session_key: Optional[str],
        message: str,
        timeout_ms: int = DEFAULT_AGENT_TIMEOUT_MS,
    ) -> str:
        resolved_id = agent_id or self._default_agent_id
        agent = self._agents.get(resolved_id) if resolved_id else None
        if agent is None:
            raise AgentDispatchError(f"Agent {resolved_id} not found in registry")

        history = self._histories.get(session_key) if session_key else None
        try:
            result = await asyncio.wait_for(
                agent.run(message, message_history=history),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError as exc:
            raise AgentDispatchError(
                f"Agent {resolved_id} timed out after {timeout_ms}ms"
            ) from exc

        if session_key:
            self._histories[session_key] = result.all_messages()
        return str(result.output)


def get_dispatcher(config: Optional[ClawflowConfig] = None) -> BaseAgentDispatcher:
    """Factory function to get the configured agent dispatcher."""

    config = config or load_config()
    backend = config.dispatch.backend

    if backend == "simulated":
        return SimulatedAgentDispatcher()
    elif backend == "http":
        if not config.dispatch.gateway_url:
            raise ValueError("dispatch.gateway_url is required for the http backend")
        return HttpAgentDispatcher(
            gateway_url=config.dispatch.gateway_url,
            api_key=config.dispatch.api_key,
            max_retries=config.dispatch.max_retries,
        )
    else:
        raise ValueError(f"Unsupported dispatch backend: {backend}")


__all__ = [
    "BaseAgentDispatcher",
    "SimulatedAgentDispatcher",
    "HttpAgentDispatcher",
    "PydanticAIAgentDispatcher",
    "get_dispatcher",
]
