"""Owner resolution strategies.

Each strategy encapsulates one tier of the owner attribution chain. The
resolver tries them in a fixed order and stops at the first one that
returns an attribution, so the tier ordering lives in a single tuple
instead of nested conditionals.

Strategies are pure, side-effect-free objects: they only read the
inventory passed to them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from mcleaner.core.heuristics import (
    APPLE_OWNER,
    app_bundle_path,
    component_count,
    dotted_prefixes,
    is_apple_label,
    key_has_prefix,
    normalize_app_name,
    normalize_bundle_key,
    package_service_name,
    static_prefix_owner,
)
from mcleaner.core.inventory import Inventory
from mcleaner.core.models import (
    Confidence,
    KeyKind,
    MatchMethod,
    OwnerAttribution,
    OwnerSource,
    RecordKind,
)

_NAME_KINDS = (KeyKind.BUNDLE_ID, KeyKind.NAME)

# Matched prefixes with at least this many components are MEDIUM, else LOW.
MEDIUM_PREFIX_COMPONENTS = 3


@dataclass(frozen=True)
class OwnerQuery:
    """
    Input of an ownership query.

    Attributes:
        label: Launchd/login-item label or bundle-id-like key.
        exec_path: Program path of the item, when known.
    """

    label: str = ""
    exec_path: str | None = None


class OwnerStrategy(ABC):
    """
    Abstract base class for a single owner resolution tier.
    """

    name: str = ""

    @abstractmethod
    def resolve(self, query: OwnerQuery, inventory: Inventory) -> OwnerAttribution | None:
        """
        Attempt to attribute the query to an owner.

        Args:
            query: Label and optional executable path to attribute.
            inventory: Inventory index to consult.

        Returns:
            An attribution if this tier matched, None to fall through.
        """
        ...


class AppleSystemStrategy(OwnerStrategy):
    """Attributes `com.apple.*` / `group.com.apple.*` labels to Apple without lookup."""

    name = "apple"

    def resolve(self, query: OwnerQuery, inventory: Inventory) -> OwnerAttribution | None:
        if not is_apple_label(query.label):
            return None
        return OwnerAttribution(
            owner_name=APPLE_OWNER,
            match_method=MatchMethod.LABEL_PREFIX,
            confidence=Confidence.HIGH,
            key=query.label,
            source=OwnerSource.SYSTEM_APP,
            installed=True,
        )


class BundleIdStrategy(OwnerStrategy):
    """Matches labels that are exactly an indexed bundle identifier."""

    name = "bundle-id"

    def resolve(self, query: OwnerQuery, inventory: Inventory) -> OwnerAttribution | None:
        entry = inventory.lookup(query.label)
        if entry is None or entry.kind != KeyKind.BUNDLE_ID:
            return None
        return OwnerAttribution.from_entry(entry, MatchMethod.BUNDLE_ID, Confidence.HIGH)


class ExecPathStrategy(OwnerStrategy):
    """
    Matches the executable path against indexed bundle paths.

    The exact `path:` key is tried first, then the `.app` bundle that
    contains the executable.
    """

    name = "path"

    def resolve(self, query: OwnerQuery, inventory: Inventory) -> OwnerAttribution | None:
        if not query.exec_path:
            return None
        entry = inventory.lookup_path(query.exec_path)
        if entry is None:
            bundle = app_bundle_path(query.exec_path)
            if bundle and bundle != query.exec_path:
                entry = inventory.lookup_path(bundle)
        if entry is None:
            return None
        return OwnerAttribution.from_entry(entry, MatchMethod.PATH, Confidence.HIGH)


class NormalizedNameStrategy(OwnerStrategy):
    """Matches the normalized label against app name (or bundle id) keys."""

    name = "name"

    def resolve(self, query: OwnerQuery, inventory: Inventory) -> OwnerAttribution | None:
        return name_match(query.label, inventory)


class PackageServiceStrategy(OwnerStrategy):
    """Maps `homebrew.mxcl.<formula>` service labels to the installed package."""

    name = "package-service"

    def resolve(self, query: OwnerQuery, inventory: Inventory) -> OwnerAttribution | None:
        package = package_service_name(query.label)
        if not package:
            return None
        entry = inventory.lookup_package(RecordKind.BREW_FORMULA, package)
        if entry is None:
            entry = inventory.lookup_package(RecordKind.BREW_CASK, package)
        if entry is None:
            return None
        return OwnerAttribution(
            owner_name=f"Homebrew ({entry.owner_name})",
            match_method=MatchMethod.PACKAGE_SERVICE,
            confidence=Confidence.MEDIUM,
            key=entry.key,
            source=entry.owner_source,
            installed=True,
        )


class LabelPrefixStrategy(OwnerStrategy):
    """Matches reverse-DNS prefixes of the label against indexed bundle ids."""

    name = "label-prefix"

    def resolve(self, query: OwnerQuery, inventory: Inventory) -> OwnerAttribution | None:
        return prefix_match(query.label, inventory)


class StaticPrefixMapStrategy(OwnerStrategy):
    """Last-resort attribution from the hand-maintained vendor prefix table."""

    name = "label-prefix-map"

    def resolve(self, query: OwnerQuery, inventory: Inventory) -> OwnerAttribution | None:
        owner = static_prefix_owner(query.label)
        if owner is None:
            return None
        return OwnerAttribution(
            owner_name=owner,
            match_method=MatchMethod.LABEL_PREFIX,
            confidence=Confidence.MEDIUM,
            key=query.label,
        )


def name_match(key: str, inventory: Inventory) -> OwnerAttribution | None:
    """Look up the normalized form of `key` among name and bundle-id keys."""
    normalized = normalize_app_name(key)
    entry = inventory.lookup(normalized)
    if entry is None or entry.kind not in _NAME_KINDS:
        return None
    return OwnerAttribution.from_entry(
        entry, MatchMethod.NORMALIZED_NAME, Confidence.MEDIUM
    )


def prefix_match(key: str, inventory: Inventory) -> OwnerAttribution | None:
    """
    Attribute a reverse-DNS key through its dotted prefixes.

    The Team ID and `group.` prefixes are stripped, then prefixes are tried
    from the full key down to two components. At each prefix an index key
    equal to it wins over one that merely extends it; within each group the
    first key in build order wins. Only bundle-id-shaped keys take part,
    never `path:` or `package:` keys.

    Confidence reflects the matched prefix, not the input: three or more
    components give MEDIUM, two give LOW.

    Args:
        key: Label or container key to attribute.
        inventory: Inventory index to consult.

    Returns:
        A LABEL_PREFIX attribution, or None if no prefix matched.
    """
    pool = inventory.dotted_entries()
    if not pool:
        return None

    for candidate in dotted_prefixes(normalize_bundle_key(key)):
        folded = candidate.casefold()
        exact = [e for e in pool if e.key.casefold() == folded]
        hits = exact or [e for e in pool if key_has_prefix(e.key, candidate)]
        if not hits:
            continue
        confidence = (
            Confidence.MEDIUM
            if component_count(candidate) >= MEDIUM_PREFIX_COMPONENTS
            else Confidence.LOW
        )
        return OwnerAttribution.from_entry(hits[0], MatchMethod.LABEL_PREFIX, confidence)

    return None


DEFAULT_STRATEGIES: tuple[OwnerStrategy, ...] = (
    AppleSystemStrategy(),
    BundleIdStrategy(),
    ExecPathStrategy(),
    NormalizedNameStrategy(),
    PackageServiceStrategy(),
    LabelPrefixStrategy(),
    StaticPrefixMapStrategy(),
)
