import errno

import pytest

from dirhandle.core.models import Dirent


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool registration."""

    def __init__(self) -> None:
        self.tools = {}

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator


class FakeStream:
    """In-memory DirStream that records how it is driven."""

    def __init__(self, names, *, fail_next_at=(), fail_close=False):
        self._names = list(names)
        self._fail_next_at = set(fail_next_at)
        self._fail_close = fail_close
        self.next_calls = 0
        self.close_calls = 0

    def next(self):
        self.next_calls += 1
        if self.next_calls in self._fail_next_at:
            raise OSError(errno.EIO, "simulated read failure")
        if not self._names:
            return None
        return Dirent(name=self._names.pop(0), kind="file")

    def close(self):
        self.close_calls += 1
        if self._fail_close:
            raise OSError(errno.EIO, "simulated close failure")


class FakeOpener:
    def __init__(self, stream=None, *, error=None):
        self.stream = stream
        self.error = error
        self.calls = []

    def __call__(self, path):
        self.calls.append(path)
        if self.error is not None:
            raise self.error
        return self.stream


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def fake_opener():
    def _make(names=(), **kwargs):
        return FakeOpener(FakeStream(names, **kwargs))
    return _make


@pytest.fixture
def failing_opener():
    def _make(error):
        return FakeOpener(error=error)
    return _make


@pytest.fixture
def empty_dir(tmp_path):
    d = tmp_path / "empty"
    d.mkdir()
    return d


@pytest.fixture
def two_file_dir(tmp_path):
    d = tmp_path / "two"
    d.mkdir()
    (d / "foo.txt").write_text("", encoding="utf-8")
    (d / "bar.txt").write_text("", encoding="utf-8")
    return d
