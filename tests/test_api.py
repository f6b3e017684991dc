import pytest
from parallel.errors import QuotaExhaustedError, RateLimitedError, UpstreamMalformedError
from parallel.models.persona import Dimension
from server.dependencies import get_selves_generator
from server.main import app

# All tests use the test_client fixture from conftest.py


@pytest.fixture
def failing_generator():
    """Install a generator that raises the given error; removed after the test."""
    def install(error):
        async def generator(user_input):
            raise error
        app.dependency_overrides[get_selves_generator] = lambda: generator
    yield install
    app.dependency_overrides.pop(get_selves_generator, None)


def test_version(test_client):
    response = test_client.get("/api/v1/version")
    assert response.status_code == 200
    assert response.json() == {"version": "1.0.0"}


def test_archetypes(test_client):
    response = test_client.get("/api/v1/archetypes")
    assert response.status_code == 200
    body = response.json()
    assert [a["dimension"] for a in body] == [d.value for d in Dimension]
    assert body[0]["mythological_mapping"] == {"deity": "Athena", "domain": "Wisdom & Strategy", "symbol": "🦉"}


def test_generate_selves(test_client, mock_llm_clients):
    response = test_client.post("/api/v1/generate-selves", json={"userInput": "Should I take the new job?"})
    assert response.status_code == 200
    body = response.json()

    assert [s["id"] for s in body["selves"]] == ["analyst", "rebel", "guardian", "visionary", "realist"]
    assert body["identity_mirror"] == "You are standing at a threshold, not a wall."
    assert body["hidden_self"]["id"] == "hidden"
    assert body["hidden_self"]["dimension"] == "visionary"
    assert body["hidden_self"]["mythological_mapping"]["symbol"] == "⚗️"

    rebel = body["selves"][1]
    assert rebel["mythological_mapping"] == {"deity": "Loki", "domain": "Chaos & Transformation", "symbol": "🔥"}
    assert rebel["color"] == "rebel"
    assert rebel["timeline"] == {
        "week": "A first step is taken.",
        "month": "The step becomes a habit.",
        "year": "The habit becomes a life.",
    }

    call_args = mock_llm_clients.call_tool.call_args
    assert call_args[1]["messages"][1].content == "Should I take the new job?"


@pytest.mark.parametrize("payload", [{}, {"userInput": ""}, {"userInput": "   "}, {"userInput": 42}, []])
def test_generate_selves_requires_input(test_client, mock_llm_clients, payload):
    response = test_client.post("/api/v1/generate-selves", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "userInput is required"}
    mock_llm_clients.call_tool.assert_not_called()


def test_generate_selves_rejects_non_json(test_client):
    response = test_client.post(
        "/api/v1/generate-selves",
        content=b"not json",
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.parametrize("error, status", [
    (RateLimitedError(), 429),
    (QuotaExhaustedError(), 402),
    (UpstreamMalformedError("No tool call in AI response"), 500),
])
def test_generate_selves_upstream_errors(test_client, failing_generator, error, status):
    failing_generator(error)
    response = test_client.post("/api/v1/generate-selves", json={"userInput": "Move abroad?"})
    assert response.status_code == status
    assert response.json() == {"error": str(error)}


def test_generate_selves_unexpected_error(test_client, failing_generator):
    failing_generator(RuntimeError("LLM_SERVICE is required but not configured"))
    response = test_client.post("/api/v1/generate-selves", json={"userInput": "Move abroad?"})
    assert response.status_code == 500
    assert "LLM_SERVICE" in response.json()["error"]


def test_generate_selves_malformed_tool_output(test_client, mock_llm_clients, tool_arguments):
    tool_arguments["selves"] = tool_arguments["selves"][:4]
    mock_llm_clients.call_tool.return_value.arguments = tool_arguments

    response = test_client.post("/api/v1/generate-selves", json={"userInput": "Move abroad?"})
    assert response.status_code == 500
    assert "missing dimensions: realist" in response.json()["error"]


def test_cors_preflight(test_client):
    response = test_client.options(
        "/api/v1/generate-selves",
        headers={
            "Origin": "https://example.app",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, x-client-info, apikey, content-type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    allowed = response.headers["access-control-allow-headers"].lower()
    for header in ("authorization", "x-client-info", "apikey", "content-type"):
        assert header in allowed


def test_cors_simple_request(test_client):
    response = test_client.get("/api/v1/version", headers={"Origin": "https://example.app"})
    assert response.headers["access-control-allow-origin"] == "*"
