from __future__ import annotations

import logging
import os
import plistlib
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Iterable, Iterator, Sequence
from xml.parsers.expat import ExpatError

from mcleaner.core.config import AppRoot, app_root_for, default_app_roots, is_system_path
from mcleaner.core.models import InventoryRecord, OwnerSource

log = logging.getLogger(__name__)

BundleIdReader = Callable[[str], "str | None"]

_APP_SUFFIX = ".app"
_MAX_DEPTH = 2
_MDLS_TIMEOUT_SECONDS = 10


def read_info_plist(app_path: str) -> str | None:
    """Return CFBundleIdentifier from the bundle's Info.plist, if readable."""
    plist = Path(app_path) / "Contents" / "Info.plist"
    try:
        with plist.open("rb") as fh:
            data = plistlib.load(fh)
    except (OSError, plistlib.InvalidFileException, ValueError, ExpatError) as exc:
        log.debug("Info.plist unreadable for %s: %s", app_path, exc)
        return None
    if not isinstance(data, dict):
        return None
    bundle_id = data.get("CFBundleIdentifier")
    if isinstance(bundle_id, str) and bundle_id.strip():
        return bundle_id.strip()
    return None


def read_spotlight(app_path: str) -> str | None:
    """Return kMDItemCFBundleIdentifier from Spotlight metadata, if available."""
    mdls = shutil.which("mdls")
    if not mdls:
        return None
    try:
        proc = subprocess.run(
            [mdls, "-name", "kMDItemCFBundleIdentifier", "-raw", app_path],
            capture_output=True,
            text=True,
            timeout=_MDLS_TIMEOUT_SECONDS,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        log.debug("mdls failed for %s: %s", app_path, exc)
        return None
    value = (proc.stdout or "").strip()
    if proc.returncode != 0 or not value or value == "(null)":
        return None
    return value


DEFAULT_BUNDLE_ID_READERS: tuple[BundleIdReader, ...] = (read_info_plist, read_spotlight)


def resolve_bundle_id(
    app_path: str, readers: Sequence[BundleIdReader] = DEFAULT_BUNDLE_ID_READERS
) -> str | None:
    """Try each reader in order and return the first bundle id found."""
    for reader in readers:
        bundle_id = reader(app_path)
        if bundle_id:
            return bundle_id
    return None


def iter_app_bundles(root: str, max_depth: int = _MAX_DEPTH) -> Iterator[str]:
    """
    Yield `.app` bundle paths up to `max_depth` levels below `root`.

    Symlinks are followed. Bundles are not descended into, and entries
    are visited in name order so scans are reproducible. Unreadable
    directories yield nothing.
    """

    def walk(directory: str, depth: int) -> Iterator[str]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            log.debug("skipping unreadable directory %s: %s", directory, exc)
            return
        for entry in entries:
            try:
                if not entry.is_dir():
                    continue
            except OSError:
                continue
            if entry.name.endswith(_APP_SUFFIX):
                yield entry.path
            elif depth < max_depth:
                yield from walk(entry.path, depth + 1)

    if not os.path.isdir(root):
        log.debug("app root missing: %s", root)
        return
    yield from walk(root, 1)


def _linked_below_root(app_path: str, real: str, root: str) -> bool:
    """True when a symlink between `root` and the bundle moves it elsewhere."""
    expected = os.path.join(os.path.realpath(root), os.path.relpath(app_path, root))
    return os.path.normpath(expected) != real


def _app_record(
    app_path: str,
    root: AppRoot,
    readers: Sequence[BundleIdReader],
) -> InventoryRecord | None:
    name = os.path.basename(app_path)[: -len(_APP_SUFFIX)]
    if not name.strip():
        return None

    # Some Apple apps are symlinks into a Cryptex; classify by the real location.
    real = os.path.realpath(app_path)
    target = real if real != app_path else None
    source = root.source
    if is_system_path(real):
        source = OwnerSource.SYSTEM_APP
    elif _linked_below_root(app_path, real, root.path):
        source = OwnerSource.USER_APP

    return InventoryRecord.app(
        name,
        app_path,
        bundle_id=resolve_bundle_id(app_path, readers),
        source=source,
        target_path=target,
    )


def scan_app_roots(
    roots: Iterable[AppRoot | str | os.PathLike[str]],
    readers: Sequence[BundleIdReader] = DEFAULT_BUNDLE_ID_READERS,
) -> list[InventoryRecord]:
    """
    Scan application roots for installed app bundles.

    Roots are scanned in the given order; plain paths are classified as
    system or user roots by location. Missing roots and permission errors
    contribute no records.

    Args:
        roots: Application roots in tie-break order.
        readers: Bundle id readers, tried in order for each bundle.

    Returns:
        One App record per discovered bundle.
    """
    records: list[InventoryRecord] = []
    for raw in roots:
        root = raw if isinstance(raw, AppRoot) else app_root_for(os.fspath(raw))
        log.debug("app scan root: %s (source=%s)", root.path, root.source.value)
        for app_path in iter_app_bundles(root.path):
            record = _app_record(app_path, root, readers)
            if record is not None:
                records.append(record)
    return records


class AppScanner:
    """Scans configured application roots for `.app` bundles."""

    def __init__(
        self,
        roots: Iterable[AppRoot | str] | None = None,
        readers: Sequence[BundleIdReader] = DEFAULT_BUNDLE_ID_READERS,
    ) -> None:
        self.roots = list(roots) if roots is not None else default_app_roots()
        self.readers = tuple(readers)

    def scan(self) -> list[InventoryRecord]:
        """Return app records for all roots."""
        return scan_app_roots(self.roots, self.readers)
