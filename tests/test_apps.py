import os
import plistlib
from pathlib import Path

import pytest

from mcleaner.core.adapters import apps
from mcleaner.core.adapters.apps import (
    AppScanner,
    iter_app_bundles,
    read_info_plist,
    resolve_bundle_id,
    scan_app_roots,
)
from mcleaner.core.config import AppRoot
from mcleaner.core.inventory import Inventory
from mcleaner.core.models import MatchMethod, OwnerSource, RecordKind
from mcleaner.core.resolver import resolve_owner_from_path

_PLIST_ONLY = (read_info_plist,)


def _make_app(parent: Path, name: str, bundle_id: str | None = None) -> Path:
    bundle = parent / f"{name}.app"
    contents = bundle / "Contents"
    contents.mkdir(parents=True)
    if bundle_id is not None:
        with (contents / "Info.plist").open("wb") as fh:
            plistlib.dump({"CFBundleIdentifier": bundle_id, "CFBundleName": name}, fh)
    return bundle


def test_read_info_plist(tmp_path: Path):
    bundle = _make_app(tmp_path, "Foo", "com.vendor.foo")

    assert read_info_plist(str(bundle)) == "com.vendor.foo"


def test_read_info_plist_missing_or_corrupt(tmp_path: Path):
    missing = _make_app(tmp_path, "Missing")
    corrupt = _make_app(tmp_path, "Corrupt")
    (corrupt / "Contents" / "Info.plist").write_bytes(b"not a plist")

    assert read_info_plist(str(missing)) is None
    assert read_info_plist(str(corrupt)) is None


def test_resolve_bundle_id_tries_readers_in_order():
    calls: list[str] = []

    def first(path: str):
        calls.append("first")
        return None

    def second(path: str):
        calls.append("second")
        return "com.vendor.second"

    assert resolve_bundle_id("/x.app", (first, second)) == "com.vendor.second"
    assert calls == ["first", "second"]
    assert resolve_bundle_id("/x.app", ()) is None


def test_read_spotlight_without_mdls(monkeypatch):
    monkeypatch.setattr(apps.shutil, "which", lambda name: None)

    assert apps.read_spotlight("/Applications/Foo.app") is None


def test_read_spotlight_treats_null_as_missing(monkeypatch):
    class _Proc:
        returncode = 0
        stdout = "(null)\n"

    monkeypatch.setattr(apps.shutil, "which", lambda name: "/usr/bin/mdls")
    monkeypatch.setattr(apps.subprocess, "run", lambda *a, **kw: _Proc())

    assert apps.read_spotlight("/Applications/Foo.app") is None


def test_iter_app_bundles_depth_and_order(tmp_path: Path):
    _make_app(tmp_path, "Zed")
    _make_app(tmp_path, "Alpha")
    _make_app(tmp_path / "Vendor", "Suite")
    _make_app(tmp_path / "a" / "b", "TooDeep")
    _make_app(tmp_path / "Alpha.app" / "Contents" / "Helpers", "Nested")
    (tmp_path / "notes.txt").write_text("x")

    found = [Path(p).relative_to(tmp_path).as_posix() for p in iter_app_bundles(str(tmp_path))]

    assert found == ["Alpha.app", "Vendor/Suite.app", "Zed.app"]


def test_iter_app_bundles_missing_root(tmp_path: Path):
    assert list(iter_app_bundles(str(tmp_path / "nope"))) == []


def test_scan_app_roots_builds_records(tmp_path: Path):
    system_root = tmp_path / "system"
    user_root = tmp_path / "user"
    _make_app(system_root, "Notes", "com.apple.Notes")
    _make_app(user_root, "Foo", "com.vendor.foo")
    _make_app(user_root, "NoId")

    records = scan_app_roots(
        [
            AppRoot(str(system_root), OwnerSource.SYSTEM_APP),
            AppRoot(str(user_root), OwnerSource.USER_APP),
        ],
        readers=_PLIST_ONLY,
    )

    assert [(r.name, r.source, r.bundle_id) for r in records] == [
        ("Notes", OwnerSource.SYSTEM_APP, "com.apple.Notes"),
        ("Foo", OwnerSource.USER_APP, "com.vendor.foo"),
        ("NoId", OwnerSource.USER_APP, None),
    ]
    assert all(r.kind == RecordKind.APP for r in records)
    assert records[1].path == str(user_root / "Foo.app")


def test_scan_app_roots_skips_missing_roots(tmp_path: Path):
    _make_app(tmp_path, "Foo", "com.vendor.foo")

    records = scan_app_roots([str(tmp_path / "missing"), str(tmp_path)], readers=_PLIST_ONLY)

    assert [r.name for r in records] == ["Foo"]
    assert records[0].source == OwnerSource.USER_APP


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlinked_bundle_records_target_and_system_source(tmp_path: Path, monkeypatch):
    cryptex = tmp_path / "cryptex"
    real = _make_app(cryptex, "Safari", "com.apple.Safari")
    user_root = tmp_path / "apps"
    user_root.mkdir()
    (user_root / "Safari.app").symlink_to(real, target_is_directory=True)
    monkeypatch.setattr(
        apps, "is_system_path", lambda path: path.startswith(os.path.realpath(cryptex))
    )

    records = scan_app_roots([AppRoot(str(user_root))], readers=_PLIST_ONLY)

    assert len(records) == 1
    record = records[0]
    assert record.path == str(user_root / "Safari.app")
    assert record.target_path == os.path.realpath(real)
    assert record.source == OwnerSource.SYSTEM_APP
    assert record.bundle_id == "com.apple.Safari"


def test_app_scanner_scans_configured_roots(tmp_path: Path):
    _make_app(tmp_path, "Foo", "com.vendor.foo")

    scanner = AppScanner([AppRoot(str(tmp_path))], readers=_PLIST_ONLY)

    assert [r.bundle_id for r in scanner.scan()] == ["com.vendor.foo"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_bundle_under_symlinked_vendor_folder_indexes_real_path(tmp_path: Path):
    real_vendor = tmp_path / "real" / "Vendor"
    real_app = _make_app(real_vendor, "Foo", "com.vendor.foo")
    root = tmp_path / "Apps"
    root.mkdir()
    (root / "Vendor").symlink_to(real_vendor, target_is_directory=True)

    records = scan_app_roots([AppRoot(str(root))], readers=_PLIST_ONLY)

    assert len(records) == 1
    assert records[0].path == str(root / "Vendor" / "Foo.app")
    assert records[0].target_path == os.path.realpath(real_app)
    assert records[0].source == OwnerSource.USER_APP

    inventory = Inventory.from_records(records)
    result = resolve_owner_from_path(
        f"{os.path.realpath(real_app)}/Contents/Info.plist", inventory, cache_roots=[]
    )
    assert result.owner_name == "Foo"
    assert result.match_method == MatchMethod.PATH


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlink_out_of_system_root_is_user_app(tmp_path: Path):
    outside = _make_app(tmp_path / "elsewhere", "Tool", "com.vendor.tool")
    _make_app(tmp_path / "system", "Notes", "com.apple.Notes")
    system_root = tmp_path / "system"
    (system_root / "Tool.app").symlink_to(outside, target_is_directory=True)

    records = scan_app_roots(
        [AppRoot(str(system_root), OwnerSource.SYSTEM_APP)], readers=_PLIST_ONLY
    )

    assert [(r.name, r.source) for r in records] == [
        ("Notes", OwnerSource.SYSTEM_APP),
        ("Tool", OwnerSource.USER_APP),
    ]
    assert records[1].target_path == os.path.realpath(outside)
