"""File name helpers for generated images."""

import random
import string
from collections.abc import Iterable

DEFAULT_FILE_NAME_PREFIX = "mawaku"
DEFAULT_RANDOM_SUFFIX_LENGTH = 5
COMPONENT_MAX_LEN = 10
SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
UNSPECIFIED = "Unspecified"


def slugify(text: str) -> str | None:
    """Lower-case ASCII alphanumerics joined by single hyphens.

    Every other character acts as a separator. Returns None when nothing
    alphanumeric remains.
    """
    chars: list[str] = []
    last_was_separator = False

    for ch in text:
        if ch.isascii() and ch.isalnum():
            chars.append(ch.lower())
            last_was_separator = False
        elif chars and not last_was_separator:
            chars.append("-")
            last_was_separator = True

    slug = "".join(chars).strip("-")
    return slug or None


def truncate_component(slug: str) -> str:
    if len(slug) <= COMPONENT_MAX_LEN:
        return slug

    truncated = slug[:COMPONENT_MAX_LEN]
    return truncated.rstrip("-") or truncated


def component_token(text: str) -> str | None:
    slug = slugify(text)
    if slug is None:
        return None
    return truncate_component(slug)


def unique_suffix(length: int = DEFAULT_RANDOM_SUFFIX_LENGTH) -> str:
    if length > len(SUFFIX_ALPHABET):
        raise ValueError(
            f"Suffix length {length} exceeds alphabet size {len(SUFFIX_ALPHABET)}"
        )
    return "".join(random.sample(SUFFIX_ALPHABET, length))


class ImageNameContext:
    """Base name for one run; hands out a fresh file stem per saved image."""

    def __init__(self, base: str, random_suffix_length: int = DEFAULT_RANDOM_SUFFIX_LENGTH):
        self.base = base
        self.random_suffix_length = random_suffix_length

    @classmethod
    def from_components(
        cls, prefix: str, components: Iterable[str | None]
    ) -> "ImageNameContext":
        builder = ImageNameBuilder(prefix)
        for component in components:
            builder.push_component(component)
        return builder.build()

    def file_stem(self, index: int) -> str:
        suffix = unique_suffix(self.random_suffix_length)
        return f"{self.base}-p{index}-{suffix}"


class ImageNameBuilder:
    def __init__(self, prefix: str = DEFAULT_FILE_NAME_PREFIX):
        self.parts: list[str] = [prefix]
        self.random_suffix_length = DEFAULT_RANDOM_SUFFIX_LENGTH

    def with_random_suffix_length(self, length: int) -> "ImageNameBuilder":
        if length > len(SUFFIX_ALPHABET):
            raise ValueError(
                f"Suffix length {length} exceeds alphabet size {len(SUFFIX_ALPHABET)}"
            )
        self.random_suffix_length = length
        return self

    def push_component(self, value: str | None) -> None:
        if value is None:
            return
        token = component_token(value)
        if token is not None:
            self.parts.append(token)

    def build(self) -> ImageNameContext:
        return ImageNameContext(
            base="-".join(self.parts),
            random_suffix_length=self.random_suffix_length,
        )


def trimmed_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def list_or_unspecified(items: Iterable[str]) -> str:
    filtered = [item.strip() for item in items if item.strip()]
    if not filtered:
        return UNSPECIFIED
    return ", ".join(filtered)


def format_context_line(label: str, value: str | None) -> str:
    text = trimmed_or_none(value)
    return f"{label}: {text if text is not None else UNSPECIFIED}"
