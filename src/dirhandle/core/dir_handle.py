"""Handle-based incremental reading of one directory.

A DirectoryHandle owns a single directory stream and exposes it through
blocking calls (read_sync/close_sync), asyncio tasks (read/close, with an
optional callback), and sync/async iteration. Every verb funnels into one
blocking core operation guarded by a threading lock; the async adapters
queue behind an asyncio lock so requests hit the cursor in issue order.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Iterator, Optional, Union

from dirhandle.core.errors import (
    CloseFailedError,
    DirectoryClosedError,
    OpenFailedError,
    ReadFailedError,
    StreamError,
)
from dirhandle.core.interfaces import DirStream, StreamOpener
from dirhandle.core.models import Dirent
from dirhandle.core.paths import PathInput, decode_path
from dirhandle.sources.scandir_stream import open_dir_stream

logger = logging.getLogger(__name__)

ReadCallback = Callable[[Optional[BaseException], Optional[Dirent]], object]
CloseCallback = Callable[[Optional[BaseException]], object]


@dataclass(frozen=True, slots=True)
class _Unopened:
    pass


@dataclass(frozen=True, slots=True)
class _Open:
    stream: DirStream


@dataclass(frozen=True, slots=True)
class _Exhausted:
    # Stream stays open until close; only the cursor is finished.
    stream: DirStream


@dataclass(frozen=True, slots=True)
class _Closed:
    # Exhaustion outlives the stream
    was_exhausted: bool = False


_State = Union[_Unopened, _Open, _Exhausted, _Closed]

_STATE_NAMES = {
    _Unopened: "unopened",
    _Open: "open",
    _Exhausted: "exhausted",
    _Closed: "closed",
}


def _mark_retrieved(fut: asyncio.Future) -> None:
    if not fut.cancelled():
        fut.exception()


class DirectoryHandle:
    """A single forward-only cursor over the entries of one directory.

    Construction is pure: the stream is opened by the first read (or by
    opendir/opendir_sync). Entries come back in the order the stream
    yields them, each exactly once, followed by a single ``None`` and then
    ``None`` on every later read. Reading after close raises
    DirectoryClosedError; closing twice is a no-op.

    ``read()`` and ``close()`` must be called with a running event loop
    and return a future. Requests that need the stream are queued as tasks
    at call time, so they apply to the cursor in the order the calls were
    made, not the order they are awaited. A close waits for reads issued
    before it, then closes; reads issued after it fail with
    DirectoryClosedError. Requests that only inspect state (reading a
    closed or exhausted handle, closing an unopened or closed one) settle
    before the call returns when nothing is queued ahead of them, so their
    callback has already fired. A handle may move between event loops only
    while no async request is outstanding.

    Iteration is single-pass. A second ``for``/``async for`` over an
    exhausted handle is empty. Do not interleave iteration with direct
    read calls on the same handle.
    """

    def __init__(self, path: PathInput, *, opener: StreamOpener = open_dir_stream) -> None:
        self._path = decode_path(path)
        self._opener = opener
        self._state: _State = _Unopened()

        # Guards every touch of the stream, from any thread
        self._lock = threading.Lock()
        # FIFO queue for async requests, created per event loop
        self._async_lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None
        # Queued async requests not yet settled
        self._pending = 0

    @property
    def path(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        return isinstance(self._state, _Closed)

    @property
    def exhausted(self) -> bool:
        state = self._state
        return isinstance(state, _Exhausted) or (isinstance(state, _Closed) and state.was_exhausted)

    def __repr__(self) -> str:
        return f"<DirectoryHandle path={self._path!r} state={_STATE_NAMES[type(self._state)]}>"

    # ---- core operations (blocking) ----

    def _open_locked(self) -> DirStream:
        state = self._state
        if isinstance(state, (_Open, _Exhausted)):
            return state.stream

        try:
            stream = self._opener(self._path)
        except OSError as e:
            raise OpenFailedError(f"Cannot open directory {self._path!r}: {e}", errno=e.errno) from e

        self._state = _Open(stream)
        return stream

    def _open_core(self) -> None:
        with self._lock:
            if isinstance(self._state, _Closed):
                raise DirectoryClosedError(f"Directory {self._path!r} is closed")
            self._open_locked()

    def _read_core(self) -> Optional[Dirent]:
        with self._lock:
            state = self._state
            if isinstance(state, _Closed):
                raise DirectoryClosedError(f"Directory {self._path!r} is closed")
            if isinstance(state, _Exhausted):
                return None

            stream = self._open_locked()
            try:
                entry = stream.next()
            except OSError as e:
                raise ReadFailedError(f"Cannot read directory {self._path!r}: {e}", errno=e.errno) from e

            if entry is None:
                self._state = _Exhausted(stream)
                logger.debug("directory %r exhausted", self._path)
            return entry

    def _close_core(self) -> None:
        with self._lock:
            state = self._state
            if isinstance(state, _Closed):
                return

            # Closed even if the stream refuses to close; a failed close is not retried.
            self._state = _Closed(was_exhausted=isinstance(state, _Exhausted))
            if isinstance(state, _Unopened):
                return

            try:
                state.stream.close()
            except StreamError as e:
                logger.warning("closing directory %r failed: %s", self._path, e)
                raise
            except OSError as e:
                logger.warning("closing directory %r failed: %s", self._path, e)
                raise CloseFailedError(f"Cannot close directory {self._path!r}: {e}", errno=e.errno) from e
            logger.debug("directory %r closed", self._path)

    # ---- synchronous API ----

    def read_sync(self) -> Optional[Dirent]:
        return self._read_core()

    def close_sync(self) -> None:
        self._close_core()

    def __iter__(self) -> Iterator[Dirent]:
        while True:
            entry = self.read_sync()
            if entry is None:
                return
            yield entry

    def __enter__(self) -> "DirectoryHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close_sync()

    # ---- asynchronous API ----

    def _bind_loop(self) -> asyncio.AbstractEventLoop:
        loop = asyncio.get_running_loop()
        # An asyncio.Lock belongs to the loop that first waits on it
        if self._lock_loop is not loop and self._pending == 0:
            self._async_lock = asyncio.Lock()
            self._lock_loop = loop
        return loop

    def _notify(self, callback: Optional[ReadCallback], error, result) -> None:
        if callback is None:
            return
        try:
            callback(error, result)
        except Exception:
            logger.exception("callback for directory %r raised", self._path)

    def _request_done(self, _fut: asyncio.Future) -> None:
        self._pending -= 1

    async def _run_queued(self, op: Callable[[], object], inline: tuple, callback: Optional[ReadCallback]):
        try:
            async with self._async_lock:
                if isinstance(self._state, inline):
                    result = op()
                else:
                    result = await asyncio.to_thread(op)
        except Exception as e:
            self._notify(callback, e, None)
            raise

        self._notify(callback, None, result)
        return result

    def _dispatch(self, op: Callable[[], object], inline: tuple, callback: Optional[ReadCallback]) -> asyncio.Future:
        loop = self._bind_loop()

        if self._pending == 0 and isinstance(self._state, inline):
            # Pure state check with nothing queued ahead: settle before returning
            fut = loop.create_future()
            try:
                result = op()
            except Exception as e:
                self._notify(callback, e, None)
                fut.set_exception(e)
            else:
                self._notify(callback, None, result)
                fut.set_result(result)
        else:
            self._pending += 1
            fut = loop.create_task(self._run_queued(op, inline, callback))
            fut.add_done_callback(self._request_done)

        if callback is not None:
            # The callback already received any error; an unawaited future must not log it again
            fut.add_done_callback(_mark_retrieved)
        return fut

    def read(self, callback: Optional[ReadCallback] = None) -> "asyncio.Future[Optional[Dirent]]":
        """Request one read; the future resolves to the next entry or None.

        If given, ``callback(error, entry)`` is invoked exactly once with
        the same outcome before the future completes. An exception raised
        by the callback is logged and does not affect the future, so the
        entry is still delivered to awaiters.
        """
        return self._dispatch(self._read_core, (_Closed, _Exhausted), callback)

    def close(self, callback: Optional[CloseCallback] = None) -> "asyncio.Future[None]":
        """Request a close; ``callback(error)`` mirrors the future's outcome."""
        notify = None if callback is None else (lambda error, _result: callback(error))
        return self._dispatch(self._close_core, (_Closed, _Unopened), notify)

    async def _iterate(self) -> AsyncIterator[Dirent]:
        while True:
            entry = await self.read()
            if entry is None:
                return
            yield entry

    def __aiter__(self) -> AsyncIterator[Dirent]:
        return self._iterate()

    async def __aenter__(self) -> "DirectoryHandle":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def opendir_sync(path: PathInput, *, opener: StreamOpener = open_dir_stream) -> DirectoryHandle:
    """Create a handle and open its stream now, so open errors raise here."""
    handle = DirectoryHandle(path, opener=opener)
    handle._open_core()
    return handle


async def opendir(path: PathInput, *, opener: StreamOpener = open_dir_stream) -> DirectoryHandle:
    """Async counterpart of opendir_sync; the open runs in a worker thread."""
    handle = DirectoryHandle(path, opener=opener)
    await asyncio.to_thread(handle._open_core)
    return handle
