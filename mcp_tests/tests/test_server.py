import importlib.util
import logging
import sys
import types
import uuid
from pathlib import Path


def _find_server_py() -> Path:
    root = Path(__file__).resolve().parents[2]
    candidates = [
        root / "src" / "dirhandle" / "server" / "server.py",
        root / "dirhandle" / "server" / "server.py",
    ]
    for p in candidates:
        if p.exists():
            return p
    raise FileNotFoundError(f"Could not find server.py. Tried: {candidates}")


def _install_fake_modules(monkeypatch, captures: dict):
    # ---- Fake mcp.server.fastmcp.FastMCP ----
    mcp_mod = types.ModuleType("mcp")
    mcp_server_mod = types.ModuleType("mcp.server")
    fastmcp_mod = types.ModuleType("mcp.server.fastmcp")

    class DummyFastMCP:
        def __init__(self, name: str):
            captures["fastmcp_name"] = name
            captures["mcp_instance"] = self
            self.run_calls = []

        def run(self, *, transport: str):
            self.run_calls.append({"transport": transport})
            captures["run_calls"] = list(self.run_calls)

    fastmcp_mod.FastMCP = DummyFastMCP

    # Mark package structure
    mcp_mod.__path__ = []
    mcp_server_mod.__path__ = []

    monkeypatch.setitem(sys.modules, "mcp", mcp_mod)
    monkeypatch.setitem(sys.modules, "mcp.server", mcp_server_mod)
    monkeypatch.setitem(sys.modules, "mcp.server.fastmcp", fastmcp_mod)

    # ---- Fake config ----
    config_mod = types.ModuleType("dirhandle.config")
    config_mod.PROJECT_ROOT = Path("/srv/project")
    config_mod.LOG_LEVEL = "DEBUG"
    monkeypatch.setitem(sys.modules, "dirhandle.config", config_mod)

    # ---- Fake tools ----
    tools_read_dir_mod = types.ModuleType("dirhandle.tools.read_dir")

    def register_read_dir(mcp, *, project_root=None):
        captures["register_read_dir_calls"] = captures.get("register_read_dir_calls", []) + [
            {"mcp": mcp, "project_root": project_root}
        ]

    tools_read_dir_mod.register = register_read_dir
    monkeypatch.setitem(sys.modules, "dirhandle.tools.read_dir", tools_read_dir_mod)


def _load_server_module(monkeypatch, captures: dict):
    _install_fake_modules(monkeypatch, captures)

    server_path = _find_server_py()
    mod_name = f"server_under_test_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(mod_name, server_path)
    assert spec and spec.loader

    module = importlib.util.module_from_spec(spec)
    monkeypatch.setitem(sys.modules, mod_name, module)
    spec.loader.exec_module(module)
    return module


def test_server_registers_tools_and_runs_stdio(monkeypatch):
    captures = {}
    module = _load_server_module(monkeypatch, captures)

    assert captures["fastmcp_name"] == "dirhandle-mcp"
    mcp = captures["mcp_instance"]

    calls = captures.get("register_read_dir_calls", [])
    assert len(calls) == 1
    assert calls[0]["mcp"] is mcp
    assert calls[0]["project_root"] == Path("/srv/project")

    basic_config_calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: basic_config_calls.append(kw))

    module.main()

    assert captures["run_calls"] == [{"transport": "stdio"}]
    assert basic_config_calls[0]["level"] == "DEBUG"
    assert basic_config_calls[0]["stream"] is sys.stderr
