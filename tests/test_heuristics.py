import pytest

from mcleaner.core.heuristics import (
    app_bundle_path,
    applications_bundle_key,
    bundle_key_variants,
    container_key,
    display_key,
    dotted_prefixes,
    is_apple_label,
    key_has_prefix,
    normalize_app_name,
    normalize_bundle_key,
    package_service_name,
    static_prefix_owner,
    strip_group_prefix,
    strip_team_id,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Google Chrome.app", "googlechrome"),
        ("Visual Studio Code", "visualstudiocode"),
        ("Foo.APP", "foo"),
        ("  Spaced\tOut  ", "spacedout"),
        ("", ""),
    ],
)
def test_normalize_app_name(raw: str, expected: str):
    assert normalize_app_name(raw) == expected


@pytest.mark.parametrize(
    "raw", ["Google Chrome.app", "x.app.app", "Foo.app ", "Weird .App", "a b.app c"]
)
def test_normalize_app_name_is_idempotent(raw: str):
    once = normalize_app_name(raw)

    assert normalize_app_name(once) == once


def test_strip_team_id_removes_ten_char_prefix():
    assert strip_team_id("UBF8T346G9.com.vendor.App") == "com.vendor.App"


@pytest.mark.parametrize(
    "key", ["com.vendor.App", "SHORT.com.vendor", "javascript.foo.bar", ""]
)
def test_strip_team_id_is_noop_without_team_prefix(key: str):
    assert strip_team_id(key) == key


def test_strip_group_prefix():
    assert strip_group_prefix("group.net.whatsapp.WhatsApp.shared") == (
        "net.whatsapp.WhatsApp.shared"
    )
    assert strip_group_prefix("com.vendor.app") == "com.vendor.app"


def test_normalize_bundle_key_strips_team_then_group():
    assert normalize_bundle_key("EQHXZ8M8AV.group.com.google.drivefs") == (
        "com.google.drivefs"
    )


def test_bundle_key_variants_are_unique_and_ordered():
    assert bundle_key_variants("EQHXZ8M8AV.group.com.google.drivefs") == [
        "EQHXZ8M8AV.group.com.google.drivefs",
        "group.com.google.drivefs",
        "com.google.drivefs",
    ]
    assert bundle_key_variants("com.vendor.app") == ["com.vendor.app"]


def test_is_apple_label():
    assert is_apple_label("com.apple.Safari") is True
    assert is_apple_label("group.com.apple.notes") is True
    assert is_apple_label("com.applesauce.helper") is False
    assert is_apple_label("") is False


def test_package_service_name():
    assert package_service_name("homebrew.mxcl.postgresql@16") == "postgresql@16"
    assert package_service_name("homebrew.mxcl.") is None
    assert package_service_name("com.vendor.agent") is None


def test_static_prefix_owner():
    assert static_prefix_owner("com.dropbox.DropboxUpdater.wake") == "Dropbox"
    assert static_prefix_owner("us.zoom.ZoomDaemon") == "Zoom"
    assert static_prefix_owner("com.google.keystone.agent") == "Google Keystone"
    assert static_prefix_owner("com.google.Chrome") is None


def test_dotted_prefixes_longest_first_down_to_two():
    assert dotted_prefixes("com.vendor.app.helper") == [
        "com.vendor.app.helper",
        "com.vendor.app",
        "com.vendor",
    ]


@pytest.mark.parametrize("key", ["single", "", "com..vendor", ".com.vendor"])
def test_dotted_prefixes_rejects_non_reverse_dns(key: str):
    assert dotted_prefixes(key) == []


def test_key_has_prefix_respects_component_boundaries():
    assert key_has_prefix("com.Vendor.App", "com.vendor") is True
    assert key_has_prefix("com.vendor", "com.vendor") is True
    assert key_has_prefix("com.vendorx.app", "com.vendor") is False
    assert key_has_prefix("com.vendor", "com.vendor.app") is False


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/Applications/Foo.app/Contents/Resources/x", "/Applications/Foo.app"),
        ("/Applications/Foo.app", "/Applications/Foo.app"),
        ("/Applications/Foo.app/", "/Applications/Foo.app"),
        ("/Applications/Outer.app/Contents/Inner.app/x", "/Applications/Outer.app"),
        ("/usr/local/bin/foo", None),
        ("", None),
    ],
)
def test_app_bundle_path(path: str, expected):
    assert app_bundle_path(path) == expected


def test_container_key_conventions():
    assert container_key("/Users/me/Library/Containers/com.vendor.app/Data") == (
        "com.vendor.app"
    )
    assert container_key(
        "/Users/me/Library/Group Containers/UBF8T346G9.Office/x"
    ) == ("UBF8T346G9.Office")
    assert (
        container_key(
            "/Users/me/Library/Caches/com.vendor.app/blob",
            cache_roots=["/Users/me/Library/Caches"],
        )
        == "com.vendor.app"
    )
    assert container_key("/Users/me/Documents/x", cache_roots=[]) is None
    assert container_key("/Users/me/Library/Containers/", cache_roots=[]) is None


def test_applications_bundle_key():
    assert applications_bundle_key("/Applications/Google Chrome.app/Contents") == (
        "googlechrome"
    )
    assert applications_bundle_key("/Users/me/Applications/Foo.app") is None


def test_display_key_caps_long_keys():
    shown = display_key("x" * 200)

    assert len(shown) == 120
    assert shown.endswith("...")
    assert display_key("a\tb") == "a b"
