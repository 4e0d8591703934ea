"""
Terrain Geo-Location Central Logging System.

All components log through log_info(), log_warn(), log_error() instead of
print(). Entries are kept in a session buffer so they can be summarised,
exported to .txt and cleared.

Message convention: a bracketed component tag first, e.g.
    log_info("[Sync] cycle=RELOCATING ...")
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import List, Tuple


PREFIX = "TGEO"


def is_verbose_debug() -> bool:
    """
    Detect if running under a debugger.

    Returns True if sys.gettrace() is active (debugger attached).
    """
    return sys.gettrace() is not None


class TerrainSyncLogger:
    """Central logging buffer for all terrain sync operations."""

    def __init__(self, echo: bool = True):
        self.buffer: List[Tuple[str, str, str]] = []  # (level, timestamp, message)
        self.started = datetime.now()
        self.echo = echo

    def _append(self, level: str, msg: str):
        ts = datetime.now().isoformat()
        self.buffer.append((level, ts, msg))
        if self.echo:
            print(f"[{PREFIX} {level}] {msg}")

    def info(self, msg: str):
        """Log an INFO message."""
        self._append("INFO", msg)

    def warn(self, msg: str):
        """Log a WARNING message."""
        self._append("WARN", msg)

    def error(self, msg: str):
        """Log an ERROR message."""
        self._append("ERROR", msg)

    def debug(self, msg: str):
        """Log a DEBUG message. Only recorded while a debugger is attached."""
        if is_verbose_debug():
            self._append("DEBUG", msg)

    def clear(self):
        """Clear the log buffer."""
        self.buffer = []

    def messages(self, level: str = None) -> List[str]:
        """Return buffered messages, optionally filtered by level."""
        return [m for l, _, m in self.buffer if level is None or l == level]

    def export_txt(self, out_path: Path) -> Path:
        """Export log to .txt file."""
        out_path = Path(out_path)
        lines = [
            "=" * 80,
            "TERRAIN GEO-LOCATION SESSION LOG",
            "=" * 80,
            f"Started: {self.started.isoformat()}",
            f"Exported: {datetime.now().isoformat()}",
            f"Total entries: {len(self.buffer)}",
            "",
        ]
        for level, ts, msg in self.buffer:
            lines.append(f"[{level}] {ts}: {msg}")

        out_path.write_text("\n".join(lines), encoding="utf-8")
        return out_path

    def get_summary(self) -> str:
        """Return quick status summary."""
        info_count = sum(1 for l, _, _ in self.buffer if l == "INFO")
        warn_count = sum(1 for l, _, _ in self.buffer if l == "WARN")
        error_count = sum(1 for l, _, _ in self.buffer if l == "ERROR")
        return f"Log: {info_count} INFO · {warn_count} WARN · {error_count} ERROR"


# Global instance
_logger = TerrainSyncLogger()


def log_info(msg: str):
    """Log an INFO message."""
    _logger.info(msg)


def log_warn(msg: str):
    """Log a WARNING message."""
    _logger.warn(msg)


def log_error(msg: str):
    """Log an ERROR message."""
    _logger.error(msg)


def log_debug(msg: str):
    _logger.debug(msg)


def get_logger() -> TerrainSyncLogger:
    """Get the global logger instance."""
    return _logger
