"""Core inventory and attribution domain models.

This module defines the data structures shared by the scanners, the
inventory index and the owner resolver: raw inventory records, the
denormalized index entries derived from them, and the attribution result
returned for every ownership query. The models are immutable and free of
filesystem, subprocess and CLI concerns.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RecordKind(str, Enum):
    """
    Kind of software unit discovered during an inventory scan.

    Values:
        APP: An application bundle (`*.app`).
        BREW_FORMULA: A Homebrew formula.
        BREW_CASK: A Homebrew cask.
    """

    APP = "app"
    BREW_FORMULA = "brew_formula"
    BREW_CASK = "brew_cask"


class OwnerSource(str, Enum):
    """
    Provenance of an inventory record.

    Values:
        SYSTEM_APP: Application shipped with macOS (including Cryptex apps).
        USER_APP: Application installed under a user-level root.
        PACKAGE: Formula or cask installed through Homebrew.
    """

    SYSTEM_APP = "system"
    USER_APP = "user"
    PACKAGE = "brew"


class KeyKind(str, Enum):
    """Namespace of an inventory index key."""

    BUNDLE_ID = "bundle_id"
    NAME = "name"
    PATH = "path"
    PACKAGE = "package"


class MatchMethod(str, Enum):
    """
    How an owner attribution was obtained.

    Values:
        BUNDLE_ID: The label is an indexed bundle identifier.
        PATH: An executable or bundle path is indexed.
        NORMALIZED_NAME: The normalized label matches an app name key.
        LABEL_PREFIX: A reverse-DNS prefix of the label matched.
        PACKAGE_SERVICE: The label names a package-managed service.
        NONE: No strategy produced an owner.
    """

    BUNDLE_ID = "bundle-id"
    PATH = "path"
    NORMALIZED_NAME = "name"
    LABEL_PREFIX = "label-prefix"
    PACKAGE_SERVICE = "package-service"
    NONE = "none"


class Confidence(str, Enum):
    """Trust level of an owner attribution."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


UNKNOWN_OWNER = "Unknown"
PATH_KEY_PREFIX = "path:"
PACKAGE_KEY_PREFIX = "package:"


@dataclass(frozen=True)
class InventoryRecord:
    """
    One discovered software unit.

    Attributes:
        kind: Kind of the unit (app, formula or cask).
        source: Where the unit was found.
        name: Human-readable display name, never empty.
        bundle_id: Reverse-DNS bundle identifier, apps only (may be absent).
        path: Visible absolute bundle path, apps only.
        package_id: Formula or cask name, packages only.
        target_path: Resolved bundle location when the app was reached
                     through a symlink.
    """

    kind: RecordKind
    source: OwnerSource
    name: str
    bundle_id: str | None = None
    path: str | None = None
    package_id: str | None = None
    target_path: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Inventory record name must not be empty.")
        if self.kind == RecordKind.APP:
            if not self.path or self.package_id:
                raise ValueError("App records need a path and no package id.")
        elif not self.package_id or self.bundle_id or self.path:
            raise ValueError("Package records need a package id and nothing else.")

    @classmethod
    def app(
        cls,
        name: str,
        path: str,
        *,
        bundle_id: str | None = None,
        source: OwnerSource = OwnerSource.USER_APP,
        target_path: str | None = None,
    ) -> InventoryRecord:
        """Build an application record."""
        return cls(
            kind=RecordKind.APP,
            source=source,
            name=name,
            bundle_id=bundle_id or None,
            path=path,
            target_path=target_path,
        )

    @classmethod
    def formula(cls, name: str) -> InventoryRecord:
        """Build a Homebrew formula record."""
        return cls(
            kind=RecordKind.BREW_FORMULA,
            source=OwnerSource.PACKAGE,
            name=name,
            package_id=name,
        )

    @classmethod
    def cask(cls, name: str) -> InventoryRecord:
        """Build a Homebrew cask record."""
        return cls(
            kind=RecordKind.BREW_CASK,
            source=OwnerSource.PACKAGE,
            name=name,
            package_id=name,
        )


@dataclass(frozen=True)
class IndexEntry:
    """
    A normalized lookup key pointing at an owner.

    Attributes:
        key: Bundle id, normalized name, `path:<abs path>` or
             `package:<formula|cask>:<name>`.
        owner_name: Display name reported for matches.
        owner_source: Provenance of the owning record.
        owner_path: Bundle path of the owner, when it is an app.
        kind: Namespace the key belongs to; derived from the key when omitted.
    """

    key: str
    owner_name: str
    owner_source: OwnerSource
    owner_path: str | None = None
    kind: KeyKind | None = None

    def __post_init__(self) -> None:
        if self.kind is None:
            object.__setattr__(self, "kind", key_kind_for(self.key))


def key_kind_for(key: str) -> KeyKind:
    """
    Infer the namespace of a bare index key.

    `path:` and `package:` keys carry their namespace; any other dotted key
    is taken as a bundle id and an undotted one as a normalized name.
    """
    if key.startswith(PATH_KEY_PREFIX):
        return KeyKind.PATH
    if key.startswith(PACKAGE_KEY_PREFIX):
        return KeyKind.PACKAGE
    return KeyKind.BUNDLE_ID if "." in key else KeyKind.NAME


@dataclass(frozen=True)
class OwnerAttribution:
    """
    Result of an ownership query.

    Confidence depends on how the owner was found, not only on whether it
    was found: name and prefix matches stay below HIGH.

    Attributes:
        owner_name: Display name of the owner, or "Unknown".
        match_method: Strategy that produced the owner.
        confidence: Trust level of the match.
        key: Lookup key that matched (or the derived key for path queries).
        source: Provenance of the matched index entry, if any.
        installed: True when the owner is confirmed present on this system.
    """

    owner_name: str
    match_method: MatchMethod
    confidence: Confidence
    key: str = ""
    source: OwnerSource | None = None
    installed: bool = False

    @classmethod
    def unknown(cls, key: str = "") -> OwnerAttribution:
        """Return the Unknown sentinel attribution."""
        return cls(
            owner_name=UNKNOWN_OWNER,
            match_method=MatchMethod.NONE,
            confidence=Confidence.LOW,
            key=key,
        )

    @classmethod
    def from_entry(
        cls,
        entry: IndexEntry,
        method: MatchMethod,
        confidence: Confidence,
    ) -> OwnerAttribution:
        """Build an inventory-backed attribution from an index entry."""
        return cls(
            owner_name=entry.owner_name,
            match_method=method,
            confidence=confidence,
            key=entry.key,
            source=entry.owner_source,
            installed=True,
        )

    @property
    def is_unknown(self) -> bool:
        """True when no owner (not even a best-effort key) was found."""
        return self.owner_name == UNKNOWN_OWNER
