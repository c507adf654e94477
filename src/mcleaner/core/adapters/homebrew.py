from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from mcleaner.core.models import InventoryRecord

log = logging.getLogger(__name__)


class HomebrewAdapter:
    """Adapter around the `brew` command line (formulae, casks, prefix)."""

    _DEFAULT_TIMEOUT_SECONDS = 60

    def __init__(self, executable: str = "brew", timeout: int | None = None) -> None:
        """Create an adapter for the given `brew` executable name or path."""
        self.executable = executable
        self.timeout = timeout or self._DEFAULT_TIMEOUT_SECONDS

    def _brew_path(self) -> str | None:
        """Return the resolved `brew` path, or None when Homebrew is absent."""
        return shutil.which(self.executable)

    def available(self) -> bool:
        """True when Homebrew is installed."""
        return self._brew_path() is not None

    def _run_lines(self, *args: str) -> list[str]:
        """Run `brew <args>` and return its non-empty stdout lines."""
        brew = self._brew_path()
        if brew is None:
            return []
        try:
            proc = subprocess.run(
                [brew, *args],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            log.info("brew %s timed out after %ss", " ".join(args), self.timeout)
            return []
        except (OSError, subprocess.SubprocessError) as exc:
            log.debug("brew %s failed: %s", " ".join(args), exc)
            return []
        if proc.returncode != 0:
            log.debug("brew %s exited with %d", " ".join(args), proc.returncode)
            return []
        return [line.strip() for line in (proc.stdout or "").splitlines() if line.strip()]

    def list_formulae(self) -> list[str]:
        """Return installed formula names."""
        return self._run_lines("list", "--formula", "-1")

    def list_casks(self) -> list[str]:
        """Return installed cask names."""
        return self._run_lines("list", "--cask", "-1")

    def scan_packages(self) -> list[InventoryRecord]:
        """Return one record per installed formula and cask."""
        if not self.available():
            log.debug("brew not found; skipping package inventory")
            return []
        records = [InventoryRecord.formula(name) for name in self.list_formulae()]
        records.extend(InventoryRecord.cask(name) for name in self.list_casks())
        return records

    def prefix(self) -> str | None:
        """Return the Homebrew prefix, or None if it cannot be determined."""
        lines = self._run_lines("--prefix")
        return lines[0] if lines else None

    def binaries(self) -> list[str]:
        """
        Return executable basenames under `<prefix>/bin` and `<prefix>/sbin`.

        The list is sorted and unique. Used to recognise Homebrew-provided
        commands when inspecting shared bin directories.
        """
        prefix = self.prefix()
        if not prefix:
            return []
        names: set[str] = set()
        for sub in ("bin", "sbin"):
            directory = Path(prefix) / sub
            try:
                entries = list(directory.iterdir())
            except OSError:
                continue
            for entry in entries:
                try:
                    if entry.is_file() and os.access(entry, os.X_OK):
                        names.add(entry.name)
                except OSError:
                    continue
        return sorted(names)
