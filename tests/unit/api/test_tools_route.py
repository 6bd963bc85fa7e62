"""
Tests for GET /api/tools.
"""

from pathlib import Path

from fastapi.testclient import TestClient

from assistant_gateway.core.config import Settings
from assistant_gateway.main import create_app
from assistant_gateway.providers.fake import FakeProvider


BUILTIN_TOOLS = {
    "getWeather",
    "get_horoscope",
    "generateInstagramCaption",
    "googleCalendar",
    "gmail",
    "googleSheets",
}


DIRECTORY_TOOL = '''
def _run(args):
    return {"pong": True}

TOOL = {
    "name": "ping",
    "description": "Reply with pong",
    "schema": {"type": "object", "properties": {}},
    "execute": _run,
}
'''


class TestListTools:
    def test_lists_builtin_tools(self, test_settings: Settings) -> None:
        with TestClient(create_app(settings=test_settings, provider=FakeProvider())) as client:
            response = client.get("/api/tools")

        assert response.status_code == 200
        tools = {tool["name"]: tool for tool in response.json()}
        assert set(tools) == BUILTIN_TOOLS
        assert tools["googleCalendar"]["requires_identity"] is True
        assert tools["getWeather"]["parameters"]["required"] == ["location"]

    def test_includes_directory_tools(self, test_settings: Settings, tmp_path: Path) -> None:
        (tmp_path / "ping.py").write_text(DIRECTORY_TOOL)
        settings = test_settings.model_copy(
            update={"tool_packages": [], "tool_directories": [str(tmp_path)]}
        )

        with TestClient(create_app(settings=settings, provider=FakeProvider())) as client:
            tools = client.get("/api/tools").json()

        assert [tool["name"] for tool in tools] == ["ping"]
        assert tools[0]["instructions"] is None
