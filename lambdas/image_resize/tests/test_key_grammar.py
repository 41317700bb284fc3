import pytest

from errors import InvalidPath
from key_grammar import parse_key
from models import ErrorCategory, KeyGrammar


def test_parse_key_splits_all_components():
    parsed = parse_key("resize/75c06d3b/private/avatar/50x60-img123")

    assert parsed.namespace_tag == "resize"
    assert parsed.middle_path == ("75c06d3b", "private", "avatar")
    assert parsed.width == 50
    assert parsed.height == 60
    assert parsed.asset_id == "img123"
    assert parsed.extension is None
    assert parsed.dimensions == "50x60"


def test_parse_key_allows_empty_middle_path():
    parsed = parse_key("resize/10x20-abc")

    assert parsed.middle_path == ()
    assert parsed.original_key == "assets//abc"


def test_asset_id_keeps_dashes_and_dots_in_plain_mode():
    parsed = parse_key("resize/a/50x60-my-photo.v2")

    assert parsed.asset_id == "my-photo.v2"
    assert parsed.original_key == "assets/a/my-photo.v2"


def test_original_key_does_not_depend_on_dimensions():
    small = parse_key("resize/something/50x60-img123")
    large = parse_key("resize/something/1000x2000-img123")

    assert small.original_key == large.original_key == "assets/something/img123"


@pytest.mark.parametrize(
    "key",
    [
        "",
        "resize",
        "resize/",
        "assets/something/50x60-img123",
        "Resize/something/50x60-img123",
        "resize/something/img123",
        "resize/something/50x60img123",
        "resize/something/50x60-",
        "resize/something/50X60-img123",
        "resize/something/-50x60-img123",
        "resize/something/50x60-img123/",
    ],
)
def test_malformed_keys_are_invalid_paths(key):
    with pytest.raises(InvalidPath) as exc_info:
        parse_key(key)

    assert exc_info.value.category is ErrorCategory.INVALID_PATH
    assert exc_info.value.message == "Path did not match expected format."


@pytest.mark.parametrize("key", ["resize/a/0x60-img", "resize/a/50x0-img", "resize/a/00x10-img"])
def test_zero_dimensions_are_invalid_paths(key):
    with pytest.raises(InvalidPath):
        parse_key(key)


def test_large_dimensions_are_left_to_the_dimension_policy():
    parsed = parse_key("resize/a/100000x99999-img")

    assert (parsed.width, parsed.height) == (100000, 99999)


def test_extension_mode_returns_extension_separately():
    parsed = parse_key(
        "resize/75c06d3b/private/avatar/50x60-img123.jpg", KeyGrammar.EXTENSION
    )

    assert parsed.asset_id == "img123"
    assert parsed.extension == "jpg"
    assert parsed.original_key == "assets/75c06d3b/private/avatar/img123.jpg"


def test_extension_mode_splits_on_last_dot():
    parsed = parse_key("resize/a/50x60-archive.tar.png", KeyGrammar.EXTENSION)

    assert parsed.asset_id == "archive.tar"
    assert parsed.extension == "png"


def test_extension_mode_requires_an_extension():
    with pytest.raises(InvalidPath):
        parse_key("resize/a/50x60-img123", KeyGrammar.EXTENSION)
