import re

import pytest

from mawaku.core.naming import (
    COMPONENT_MAX_LEN,
    DEFAULT_FILE_NAME_PREFIX,
    DEFAULT_RANDOM_SUFFIX_LENGTH,
    SUFFIX_ALPHABET,
    ImageNameBuilder,
    ImageNameContext,
    component_token,
    format_context_line,
    list_or_unspecified,
    slugify,
    trimmed_or_none,
    truncate_component,
    unique_suffix,
)


def test_slugify_preserves_alphanumeric_segments():
    assert slugify("Hakone, Japan") == "hakone-japan"


def test_slugify_collapses_separator_runs():
    assert slugify("  São  Paulo // Brazil__") == "s-o-paulo-brazil"
    assert slugify("a.b\\c_d-e") == "a-b-c-d-e"


def test_slugify_returns_none_without_alphanumerics():
    assert slugify("") is None
    assert slugify("   ") is None
    assert slugify("!!--//") is None


@pytest.mark.parametrize(
    "text", ["Hakone, Japan", "golden hour", "  Late   Autumn!! ", "Rio-de-Janeiro", "x"]
)
def test_slugify_is_idempotent(text: str):
    slug = slugify(text)
    assert slug is not None
    assert slugify(slug) == slug


def test_component_token_slugifies_input():
    assert component_token("Hakone, Japan") == "hakone-jap"


def test_truncate_component_trims_hyphen_left_by_cut():
    assert truncate_component("abcdefghi-jk") == "abcdefghi"


def test_truncate_component_keeps_short_slugs():
    assert truncate_component("dusk") == "dusk"


@pytest.mark.parametrize(
    "text",
    [
        "Hakone, Japan",
        "The Grand Canyon National Park",
        "---a---",
        "Ünïcödé Ville 12345",
        "abcdefghi jklmnop",
    ],
)
def test_component_token_is_bounded_and_clean(text: str):
    token = component_token(text)
    assert token is not None
    assert len(token) <= COMPONENT_MAX_LEN
    assert re.fullmatch(r"[a-z0-9-]+", token)
    assert not token.startswith("-")
    assert not token.endswith("-")


def test_builder_discards_empty_components():
    builder = ImageNameBuilder(DEFAULT_FILE_NAME_PREFIX)
    builder.push_component("Hakone")
    builder.push_component("   ")
    builder.push_component(None)
    assert builder.build().base == "mawaku-hakone"


def test_builder_with_no_components_uses_prefix_only():
    assert ImageNameBuilder().build().base == DEFAULT_FILE_NAME_PREFIX


def test_file_stem_includes_index_and_random_suffix():
    context = ImageNameContext.from_components(
        DEFAULT_FILE_NAME_PREFIX, ["Hakone, Japan", "Spring", "Dusk"]
    )
    stem = context.file_stem(1)

    assert stem.startswith("mawaku-hakone-jap-spring-dusk-p1-")
    suffix = stem.rsplit("-", 1)[1]
    assert len(suffix) == DEFAULT_RANDOM_SUFFIX_LENGTH
    assert re.fullmatch(r"[A-Z0-9]+", suffix)


def test_file_stem_is_fresh_per_call():
    context = ImageNameContext.from_components(DEFAULT_FILE_NAME_PREFIX, ["Lisbon"])
    stems = {context.file_stem(1) for _ in range(20)}
    assert len(stems) > 1


def test_unique_suffix_draws_without_replacement():
    suffix = unique_suffix(len(SUFFIX_ALPHABET))
    assert sorted(suffix) == sorted(SUFFIX_ALPHABET)


def test_unique_suffix_rejects_length_beyond_alphabet():
    with pytest.raises(ValueError):
        unique_suffix(len(SUFFIX_ALPHABET) + 1)


def test_custom_suffix_length():
    context = ImageNameBuilder().with_random_suffix_length(8).build()
    assert len(context.file_stem(2).rsplit("-", 1)[1]) == 8


def test_context_helpers():
    assert trimmed_or_none("  spring ") == "spring"
    assert trimmed_or_none("   ") is None
    assert trimmed_or_none(None) is None
    assert list_or_unspecified([" a ", "", "b"]) == "a, b"
    assert list_or_unspecified(["  "]) == "Unspecified"
    assert format_context_line("Season", " winter ") == "Season: winter"
    assert format_context_line("Season", None) == "Season: Unspecified"
