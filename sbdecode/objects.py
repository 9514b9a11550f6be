from typing import List, Optional

from sbdecode.commands import decode_command, field_at, to_number
from sbdecode.enums import UNSUPPORTED_LAYERS, Layer, Origin
from sbdecode.errors import line_context, report_diagnostic
from sbdecode.model import (
    AnimationObject,
    Command,
    Coord,
    Entry,
    SpriteObject,
    StoryboardObject,
)

SPRITE_TAG = "Sprite"
ANIMATION_TAG = "Animation"
# Background image and break period rows share the events section.
IGNORED_TAGS = frozenset({"0", "2"})

_EXPECTED_FIELD_COUNTS = {SPRITE_TAG: 6, ANIMATION_TAG: 9}
_LOOP_ONCE = "LoopOnce"


def _strip_quotes(filepath: str) -> str:
    if len(filepath) >= 2 and filepath.startswith('"') and filepath.endswith('"'):
        return filepath[1:-1]
    return filepath


def _parse_layer(text: Optional[str]) -> Optional[Layer]:
    if text in UNSUPPORTED_LAYERS:
        report_diagnostic(f"{text} layer is not supported.")
        return None
    try:
        return Layer(text)
    except ValueError:
        report_diagnostic(f"Invalid value for layer: {text}")
        return None


def _parse_origin(text: Optional[str]) -> Optional[Origin]:
    try:
        return Origin(text)
    except ValueError:
        report_diagnostic(f"Invalid value for origin: {text}")
        return None


def decode_object(entry: Entry) -> Optional[StoryboardObject]:
    """Decode a top-level entry into a sprite or animation.

    Returns ``None`` for rows that are not scene objects or fail validation.
    """
    with line_context(entry.line):
        values = entry.values
        object_type = values[0]

        if object_type in IGNORED_TAGS:
            return None
        if object_type not in _EXPECTED_FIELD_COUNTS:
            report_diagnostic(f'Unknown type "{object_type}"')
            return None

        expected = _EXPECTED_FIELD_COUNTS[object_type]
        if len(values) != expected:
            report_diagnostic(f"Expected {expected} values, got {len(values)}")

        layer = _parse_layer(field_at(values, 1))
        if layer is None:
            return None
        origin = _parse_origin(field_at(values, 2))
        if origin is None:
            return None

        filepath = _strip_quotes(field_at(values, 3) or "")
        default_pos = Coord(
            x=to_number(field_at(values, 4)),
            y=to_number(field_at(values, 5)),
        )

    commands: List[Command] = []
    for child in entry.children:
        commands.extend(decode_command(child))

    if object_type == ANIMATION_TAG:
        return AnimationObject(
            layer=layer,
            origin=origin,
            filepath=filepath,
            default_pos=default_pos,
            commands=commands,
            frame_count=to_number(field_at(values, 6)),
            frame_delay=to_number(field_at(values, 7)),
            loops=field_at(values, 8) != _LOOP_ONCE,
        )
    return SpriteObject(
        layer=layer,
        origin=origin,
        filepath=filepath,
        default_pos=default_pos,
        commands=commands,
    )
