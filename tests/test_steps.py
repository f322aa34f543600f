"""Tests for the individual step executors."""

import json
import time

import httpx
import pytest

from clawflow.contracts import Workflow
from clawflow.dispatch import BaseAgentDispatcher, SimulatedAgentDispatcher
from clawflow.exceptions import AgentDispatchError
from clawflow.steps import (
    AgentCallExecutor,
    ConditionExecutor,
    DelayExecutor,
    SetContextExecutor,
    TransformExecutor,
    WebhookExecutor,
)


def _step(step_type, config=None, step_id="s1"):
    wf = Workflow.model_validate(
        {
            "id": "wf",
            "user_id": "u1",
            "name": "Test",
            "steps": [{"id": step_id, "type": step_type, "config": config or {}}],
        }
    )
    return wf.steps[0]


class FailingDispatcher(BaseAgentDispatcher):
    async def send(self, agent_id, session_key, message, timeout_ms=30000):
        raise AgentDispatchError("Agent call timed out after 10ms")


@pytest.mark.asyncio
async def test_agent_call_interpolates_and_dispatches():
    dispatcher = SimulatedAgentDispatcher()
    executor = AgentCallExecutor(dispatcher)
    step = _step(
        "agent_call",
        {"agent_id": "writer", "session_key": "s-1", "message": "hello {{name}}"},
    )

    result = await executor.execute(step, {"name": "Ada"})

    assert result.success
    assert result.output == {
        "response": "[Simulated agent response to: hello Ada]",
        "agent_id": "writer",
        "session_key": "s-1",
    }
    assert dispatcher.sent == [
        {"agent_id": "writer", "session_key": "s-1", "message": "hello Ada"}
    ]


@pytest.mark.asyncio
async def test_agent_call_requires_message():
    result = await AgentCallExecutor(SimulatedAgentDispatcher()).execute(
        _step("agent_call", {}), {}
    )
    assert not result.success
    assert result.error == "agent_call requires a message"


@pytest.mark.asyncio
async def test_agent_call_dispatch_failure_is_step_failure():
    result = await AgentCallExecutor(FailingDispatcher()).execute(
        _step("agent_call", {"message": "hi", "timeout_ms": 10}), {}
    )
    assert not result.success
    assert "timed out" in result.error


@pytest.mark.asyncio
async def test_condition_sets_next_step():
    executor = ConditionExecutor()
    step = _step(
        "condition", {"expression": "count > 3", "on_true": "big", "on_false": "small"}
    )

    result = await executor.execute(step, {"count": 5})
    assert result.success
    assert result.output == {"condition_result": True}
    assert result.next_step == "big"

    result = await executor.execute(step, {"count": 1})
    assert result.output == {"condition_result": False}
    assert result.next_step == "small"


@pytest.mark.asyncio
async def test_condition_requires_expression():
    result = await ConditionExecutor().execute(_step("condition", {}), {})
    assert not result.success
    assert result.error == "condition requires an expression"


@pytest.mark.asyncio
async def test_transform_maps_context_paths():
    step = _step("transform", {"mappings": {"name": "user.name", "gone": "nope.x"}})
    result = await TransformExecutor().execute(step, {"user": {"name": "Ada"}})
    assert result.success
    assert result.output == {"name": "Ada", "gone": None}


@pytest.mark.asyncio
async def test_transform_without_mappings_is_empty_success():
    result = await TransformExecutor().execute(_step("transform"), {"a": 1})
    assert result.success
    assert result.output == {}


@pytest.mark.asyncio
async def test_delay_suspends_for_duration():
    start = time.monotonic()
    result = await DelayExecutor().execute(_step("delay", {"duration_ms": 50}), {})
    assert time.monotonic() - start >= 0.049
    assert result.success
    assert result.output == {"delayed_ms": 50}


@pytest.mark.asyncio
async def test_set_context_interpolates_strings_against_current_context():
    step = _step(
        "set_context",
        {"values": {"first": "hi {{name}}", "second": "{{first}}", "n": 3, "flag": False}},
    )
    result = await SetContextExecutor().execute(step, {"name": "Ada"})
    assert result.success
    # "second" does not see "first" produced in the same step
    assert result.output == {"first": "hi Ada", "second": "", "n": 3, "flag": False}


def _mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_webhook_posts_interpolated_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"received": True})

    async with _mock_client(handler) as client:
        step = _step(
            "webhook",
            {
                "url": "https://hooks.example.com/{{team}}",
                "headers": {"X-Token": "abc"},
                "body": {"text": "Run for {{name}}"},
            },
        )
        result = await WebhookExecutor(client).execute(
            step, {"team": "ops", "name": "Ada"}
        )

    assert result.success
    assert result.output == {"status": 201, "data": {"received": True}}
    assert seen["method"] == "POST"
    assert seen["url"] == "https://hooks.example.com/ops"
    assert seen["headers"]["content-type"] == "application/json"
    assert seen["headers"]["x-token"] == "abc"
    assert seen["body"] == {"text": "Run for Ada"}


@pytest.mark.asyncio
async def test_webhook_sends_empty_body_object():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["content"] = request.content
        return httpx.Response(204)

    async with _mock_client(handler) as client:
        step = _step("webhook", {"url": "https://hooks.example.com", "body": {}})
        result = await WebhookExecutor(client).execute(step, {})

    assert result.success
    assert seen["content"] == b"{}"
    assert result.output == {"status": 204, "data": None}


@pytest.mark.asyncio
async def test_webhook_non_2xx_is_failure_with_status_output():
    def handler(request):
        return httpx.Response(500, text="boom")

    async with _mock_client(handler) as client:
        result = await WebhookExecutor(client).execute(
            _step("webhook", {"url": "https://hooks.example.com", "method": "GET"}), {}
        )

    assert not result.success
    assert result.error == "HTTP 500"
    assert result.output == {"status": 500, "data": None}


@pytest.mark.asyncio
async def test_webhook_network_error_is_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _mock_client(handler) as client:
        result = await WebhookExecutor(client).execute(
            _step("webhook", {"url": "https://hooks.example.com"}), {}
        )

    assert not result.success
    assert "connection refused" in result.error


@pytest.mark.asyncio
async def test_webhook_requires_url():
    result = await WebhookExecutor().execute(_step("webhook", {}), {})
    assert not result.success
    assert result.error == "webhook requires a url"
