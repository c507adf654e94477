"""Label and path heuristics used to derive inventory lookup keys.

Launchd labels, container folder names and cache folders rarely match an
inventory key verbatim. The helpers here turn such raw inputs into
candidate keys (normalized app names, Team-ID-stripped bundle ids, dotted
prefixes, container segments) before the owner resolver consults the
inventory index. Everything in this module is a pure string function.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

_TEAM_ID_RE = re.compile(r"^[A-Z0-9]{10}\.(.+)$")

_APP_SUFFIX = ".app"
_GROUP_PREFIX = "group."
_APPLE_PREFIXES = ("com.apple.", "group.com.apple.")
_PACKAGE_SERVICE_PREFIX = "homebrew.mxcl."

_CONTAINER_MARKERS = ("/Containers/", "/Group Containers/")

MIN_PREFIX_COMPONENTS = 2
MAX_DISPLAY_KEY_LENGTH = 120

APPLE_OWNER = "Apple (system)"

# Vendors whose helpers are often installed without a scannable app bundle.
STATIC_LABEL_PREFIXES: tuple[tuple[str, str], ...] = (
    ("com.dropbox.", "Dropbox"),
    ("us.zoom.", "Zoom"),
    ("com.google.keystone.", "Google Keystone"),
    ("com.google.GoogleUpdater.", "Google Keystone"),
)


def normalize_app_name(name: str) -> str:
    """
    Normalize an application name into a conservative inventory key.

    The name is lowercased, all whitespace is removed and any trailing
    `.app` suffix is stripped, so "Google Chrome.app" becomes
    "googlechrome". Applying it twice yields the same result.
    """
    s = "".join((name or "").lower().split())
    while s.endswith(_APP_SUFFIX):
        s = s[: -len(_APP_SUFFIX)]
    return s


def strip_team_id(key: str) -> str:
    """Remove a leading `<10-char Team ID>.` prefix, if present."""
    match = _TEAM_ID_RE.match(key or "")
    return match.group(1) if match else (key or "")


def strip_group_prefix(key: str) -> str:
    """Remove a leading `group.` prefix, if present."""
    if key and key.startswith(_GROUP_PREFIX):
        return key[len(_GROUP_PREFIX) :]
    return key or ""


def normalize_bundle_key(key: str) -> str:
    """
    Reduce a container-style identifier to a plain bundle id.

    Examples:
        EQHXZ8M8AV.group.com.google.drivefs -> com.google.drivefs
        group.net.whatsapp.WhatsApp.shared  -> net.whatsapp.WhatsApp.shared
        UBF8T346G9.com.microsoft.teams      -> com.microsoft.teams
    """
    return strip_group_prefix(strip_team_id(key))


def bundle_key_variants(key: str) -> list[str]:
    """
    Return the distinct lookup variants of a key, most literal first.

    The list holds the raw key, then the Team-ID-stripped key, then the
    key with both the Team ID and a `group.` prefix removed.
    """
    variants: list[str] = []
    for candidate in (key, strip_team_id(key), normalize_bundle_key(key)):
        if candidate and candidate not in variants:
            variants.append(candidate)
    return variants


def is_apple_label(label: str) -> bool:
    """True for Apple-owned reverse-DNS identifiers."""
    return bool(label) and label.startswith(_APPLE_PREFIXES)


def package_service_name(label: str) -> str | None:
    """
    Return the formula behind a Homebrew-managed launchd label.

    `homebrew.mxcl.postgresql@16` yields `postgresql@16`; any other label
    yields None.
    """
    if not label or not label.startswith(_PACKAGE_SERVICE_PREFIX):
        return None
    name = label[len(_PACKAGE_SERVICE_PREFIX) :]
    return name or None


def static_prefix_owner(label: str) -> str | None:
    """Return the owner of a label from the hand-maintained vendor table."""
    if not label:
        return None
    for prefix, owner in STATIC_LABEL_PREFIXES:
        if label.startswith(prefix):
            return owner
    return None


def dotted_prefixes(
    key: str, min_components: int = MIN_PREFIX_COMPONENTS
) -> list[str]:
    """
    Return dotted prefixes of `key`, longest first.

    `com.vendor.app.helper` yields `com.vendor.app.helper`,
    `com.vendor.app` and `com.vendor`. Keys with fewer than
    `min_components` non-empty components yield nothing.
    """
    parts = (key or "").split(".")
    if len(parts) < min_components or any(not p for p in parts):
        return []
    return [".".join(parts[:n]) for n in range(len(parts), min_components - 1, -1)]


def component_count(key: str) -> int:
    """Number of dot-separated components in `key`."""
    return key.count(".") + 1 if key else 0


def key_has_prefix(key: str, prefix: str) -> bool:
    """
    True when `key` equals `prefix` or extends it on a dot boundary.

    Comparison is case-insensitive, like bundle identifiers on macOS:
    `com.Vendor.App` has prefix `com.vendor` but not `com.ven`.
    """
    k = key.casefold()
    p = prefix.casefold()
    return k == p or k.startswith(p + ".")


def app_bundle_path(path: str) -> str | None:
    """
    Return the outermost `.app` bundle containing `path`.

    `/Applications/Foo.app/Contents/MacOS/foo` and `/Applications/Foo.app/`
    both yield `/Applications/Foo.app`.
    """
    if not path:
        return None
    marker = _APP_SUFFIX + "/"
    idx = path.find(marker)
    if idx > 0:
        return path[: idx + len(_APP_SUFFIX)]
    trimmed = path.rstrip("/")
    if trimmed.endswith(_APP_SUFFIX) and len(trimmed) > len(_APP_SUFFIX):
        return trimmed
    return None


def default_cache_roots() -> list[str]:
    """Return the user cache roots whose first segment names an owner."""
    return [str(Path.home() / "Library" / "Caches")]


def container_key(path: str, cache_roots: Iterable[str] | None = None) -> str | None:
    """
    Derive an owner key from well-known container conventions.

    - `.../Containers/<key>/...`
    - `.../Group Containers/<key>/...`
    - `<cache root>/<key>/...`

    Returns None when the path follows none of them.
    """
    if not path:
        return None

    for marker in _CONTAINER_MARKERS:
        idx = path.find(marker)
        if idx >= 0:
            rest = path[idx + len(marker) :]
            return rest.split("/", 1)[0] or None

    roots = default_cache_roots() if cache_roots is None else cache_roots
    for root in roots:
        prefix = root.rstrip("/") + "/"
        if path.startswith(prefix):
            return path[len(prefix) :].split("/", 1)[0] or None

    return None


def applications_bundle_key(path: str) -> str | None:
    """Return the normalized app name for paths under `/Applications/<Name>.app`."""
    if not path or not path.startswith("/Applications/"):
        return None
    bundle = app_bundle_path(path)
    if not bundle:
        return None
    return normalize_app_name(bundle.rsplit("/", 1)[-1]) or None


def display_key(key: str, limit: int = MAX_DISPLAY_KEY_LENGTH) -> str:
    """Sanitize a raw key for display, capping it with an ASCII ellipsis."""
    text = " ".join((key or "").replace("\t", " ").splitlines())
    if len(text) <= limit:
        return text
    return f"{text[: limit - 3]}..."
