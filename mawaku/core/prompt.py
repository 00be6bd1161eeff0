from mawaku.core.naming import format_context_line, list_or_unspecified, trimmed_or_none
from mawaku.core.shapes import PlaceDescription

BASE_INSTRUCTIONS = (
    "Create a photorealistic, high-resolution background image for a video call. "
    "Use a wide 16:9 composition with a calm, uncluttered center, soft depth of field, "
    "and no people, text, or logos."
)


def craft_prompt(
    base: str,
    location: str,
    season: str | None = None,
    time_of_day: str | None = None,
) -> str:
    """Join the base instructions with location, season and lighting clauses."""
    segments: list[str] = []

    base_text = trimmed_or_none(base)
    if base_text:
        segments.append(base_text)

    location_text = trimmed_or_none(location)
    if location_text:
        segments.append(
            f"Set the scene in {location_text}, capturing details that make the place recognizable."
        )

    season_text = trimmed_or_none(season)
    if season_text:
        segments.append(f"It is {season_text}.")

    time_text = trimmed_or_none(time_of_day)
    if time_text:
        segments.append(f"Capture the lighting of {time_text}.")

    return " ".join(segments)


def build_structured_prompt(
    instructions: str,
    description: PlaceDescription | None = None,
    season: str | None = None,
    time_of_day: str | None = None,
) -> str:
    """Fold a place description and scene timing into the image prompt.

    Blocks are separated by a blank line. Absent values render as "Unspecified".
    """
    blocks: list[str] = []

    instructions_text = trimmed_or_none(instructions)
    if instructions_text:
        blocks.append(instructions_text)

    ambiance = description.ambiance if description else None
    items = description.items if description else []
    keywords = description.keywords if description else []
    blocks.append(
        "\n".join(
            [
                "Complete place description:",
                format_context_line("Ambiance", ambiance),
                f"Items: {list_or_unspecified(items)}",
                f"Keywords: {list_or_unspecified(keywords)}",
            ]
        )
    )

    blocks.append(
        "\n".join(
            [
                "Scene timing:",
                format_context_line("Season", season),
                format_context_line("Time of day", time_of_day),
            ]
        )
    )

    return "\n\n".join(blocks)


def place_description_prompt(location: str) -> str:
    return (
        f"Describe {location.strip()} as the setting for a video-call background image. "
        "Return JSON with three fields: "
        "'ambiance', one or two sentences about the mood, light and atmosphere; "
        "'items', a list of concrete visual elements that should appear in the scene; "
        "'keywords', a list of short descriptive keywords for the place. "
        "Do not include people."
    )
