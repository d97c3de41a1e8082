"""Process host with optional capability probes."""

from __future__ import annotations

import os
import sys
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import structlog

if TYPE_CHECKING:
    from compdrive.lib.ports import System

try:
    import resource
except ImportError:  # pragma: no cover - not available on Windows
    resource = None

logger = structlog.get_logger(__name__)

NEW_LINES: dict[str, str] = {"lf": "\n", "crlf": "\r\n"}
DEFAULT_POLLING_INTERVAL_SECONDS = 0.25


@dataclass(frozen=True, slots=True)
class HostCapabilities:
    """Feature flags probed from one host instance."""

    terminal_probe: bool = False
    modified_time: bool = False
    delete_file: bool = False
    watch: bool = False
    memory_usage: bool = False

    @property
    def build(self) -> bool:
        return self.modified_time

    @property
    def clean(self) -> bool:
        return self.modified_time and self.delete_file


def probe_capabilities(host: System) -> HostCapabilities:
    """Return which optional operations `host` provides."""

    return HostCapabilities(
        terminal_probe=host.write_output_is_tty is not None,
        modified_time=host.get_modified_time is not None and host.set_modified_time is not None,
        delete_file=host.delete_file is not None,
        watch=host.watch_file is not None and host.watch_directory is not None,
        memory_usage=host.get_memory_usage is not None,
    )


_STATM_PATH = Path("/proc/self/statm")


def _current_resident_bytes(statm_path: Path = _STATM_PATH) -> int | None:
    try:
        fields = statm_path.read_text(encoding="ascii").split()
    except OSError:
        return None
    if len(fields) < 2 or not fields[1].isdigit():
        return None
    # Second field is resident pages.
    return int(fields[1]) * os.sysconf("SC_PAGE_SIZE")


@dataclass(slots=True)
class FileWatcher:
    """Handle returned by the polling watchers; `close()` stops polling."""

    _stop: threading.Event
    _thread: threading.Thread

    def close(self) -> None:
        self._stop.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)


def _snapshot(path: Path, recursive: bool) -> dict[str, float]:
    if path.is_file():
        return {str(path): path.stat().st_mtime}
    if not path.is_dir():
        return {}
    pattern = "**/*" if recursive else "*"
    snapshot: dict[str, float] = {}
    for entry in path.glob(pattern):
        try:
            snapshot[str(entry)] = entry.stat().st_mtime
        except FileNotFoundError:
            continue
    return snapshot


def _poll(
    path: Path,
    callback: Callable[[str], None],
    *,
    recursive: bool,
    interval: float,
) -> FileWatcher:
    stop = threading.Event()

    def _run() -> None:
        previous = _snapshot(path, recursive)
        while not stop.wait(interval):
            current = _snapshot(path, recursive)
            if current == previous:
                continue
            changed = sorted(
                name
                for name in current.keys() | previous.keys()
                if current.get(name) != previous.get(name)
            )
            previous = current
            for name in changed:
                callback(name)

    thread = threading.Thread(target=_run, name=f"compdrive-watch:{path}", daemon=True)
    thread.start()
    return FileWatcher(_stop=stop, _thread=thread)


class ProcessHost:
    """`System` implementation backed by the current process and filesystem."""

    def __init__(
        self,
        *,
        output_stream: TextIO | None = None,
        new_line: str = "lf",
        polling_interval: float = DEFAULT_POLLING_INTERVAL_SECONDS,
        enable_watch: bool = True,
    ) -> None:
        if new_line not in NEW_LINES:
            raise ValueError(f"Unsupported new line kind '{new_line}'. Expected lf or crlf.")
        self._output = output_stream or sys.stdout
        self._polling_interval = polling_interval
        self.new_line = NEW_LINES[new_line]
        self.write_output_is_tty: Callable[[], bool] | None = self._output_is_tty
        self.get_modified_time: Callable[[str], float | None] | None = self._get_modified_time
        self.set_modified_time: Callable[[str, float], None] | None = self._set_modified_time
        self.delete_file: Callable[[str], None] | None = self._delete_file
        self.watch_file: Callable[..., object] | None = self._watch_file if enable_watch else None
        self.watch_directory: Callable[..., object] | None = (
            self._watch_directory if enable_watch else None
        )
        self.get_memory_usage: Callable[[], int] | None = (
            self._get_memory_usage
            if resource is not None or _current_resident_bytes() is not None
            else None
        )

    def write(self, text: str) -> None:
        self._output.write(text)
        self._output.flush()

    def get_current_directory(self) -> str:
        return Path.cwd().as_posix()

    def get_executing_file_path(self) -> str:
        return Path(__file__).resolve().as_posix()

    def file_exists(self, path: str) -> bool:
        return Path(path).is_file()

    def directory_exists(self, path: str) -> bool:
        return Path(path).is_dir()

    def read_file(self, path: str) -> str | None:
        try:
            return Path(path).read_text(encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError, UnicodeDecodeError):
            return None

    def write_file(self, path: str, data: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(data, encoding="utf-8")

    def _output_is_tty(self) -> bool:
        try:
            return bool(self._output.isatty())
        except (AttributeError, ValueError, OSError):
            return False

    def _get_modified_time(self, path: str) -> float | None:
        try:
            return Path(path).stat().st_mtime
        except FileNotFoundError:
            return None

    def _set_modified_time(self, path: str, timestamp: float) -> None:
        os.utime(path, (timestamp, timestamp))

    def _delete_file(self, path: str) -> None:
        Path(path).unlink(missing_ok=True)

    def _watch_file(self, path: str, callback: Callable[[str], None]) -> FileWatcher:
        logger.debug("watching file", path=path)
        return _poll(Path(path), callback, recursive=False, interval=self._polling_interval)

    def _watch_directory(
        self,
        path: str,
        callback: Callable[[str], None],
        recursive: bool = False,
    ) -> FileWatcher:
        logger.debug("watching directory", path=path, recursive=recursive)
        return _poll(Path(path), callback, recursive=recursive, interval=self._polling_interval)

    def _get_memory_usage(self) -> int:
        """Current resident set size in bytes.

        Read from `/proc/self/statm` where it exists. Elsewhere only the peak
        resident size from `getrusage` is available, so that is reported.
        """
        current = _current_resident_bytes()
        if current is not None:
            return current
        if resource is None:
            return -1
        usage = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        # Linux reports kilobytes, macOS reports bytes.
        return usage if sys.platform == "darwin" else usage * 1024
