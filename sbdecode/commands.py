import math
import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence, Type

from sbdecode.enums import CommandType, Easing, Parameter
from sbdecode.errors import line_context, report_diagnostic
from sbdecode.model import (
    Color,
    ColorCommand,
    Command,
    Coord,
    Entry,
    FadeCommand,
    MoveCommand,
    MoveXCommand,
    MoveYCommand,
    ParameterCommand,
    RotateCommand,
    ScaleCommand,
    VectorScaleCommand,
)

# Plain decimal literals only: float() alone also takes "1_000", "inf" and "nan".
_NUMBER_REGEX = re.compile(r"^[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|Infinity)$")

LOOP_TAG = "L"
TRIGGER_TAG = "T"


def to_number(text: Optional[str]) -> float:
    """Convert a source field to a float.

    Missing fields and unparseable text give NaN; blank text gives 0.
    """
    if text is None:
        return math.nan
    stripped = text.strip()
    if not stripped:
        return 0.0
    if _NUMBER_REGEX.match(stripped) is None:
        return math.nan
    return float(stripped)


def field_at(values: Sequence[str], index: int) -> Optional[str]:
    if index < len(values):
        return values[index]
    return None


def _number_or(text: Optional[str], default: float) -> float:
    if text is None or not text.strip():
        return default
    return to_number(text)


def _convert_number(fields: Sequence[str]) -> float:
    return to_number(fields[0])


def _convert_coord(fields: Sequence[str]) -> Coord:
    return Coord(x=to_number(fields[0]), y=to_number(fields[1]))


def _convert_color(fields: Sequence[str]) -> Color:
    return Color(r=to_number(fields[0]), g=to_number(fields[1]), b=to_number(fields[2]))


def _convert_parameter(fields: Sequence[str]) -> Parameter:
    symbol = fields[0].strip()
    try:
        return Parameter(symbol)
    except ValueError as exc:
        raise ValueError(f"Unknown parameter '{symbol}'.") from exc


@dataclass(frozen=True)
class _CommandSpec:
    arity: int
    convert: Callable[[Sequence[str]], object]
    command_cls: Type[Command]


_COMMAND_SPECS: Dict[CommandType, _CommandSpec] = {
    CommandType.FADE: _CommandSpec(1, _convert_number, FadeCommand),
    CommandType.MOVE: _CommandSpec(2, _convert_coord, MoveCommand),
    CommandType.MOVE_X: _CommandSpec(1, _convert_number, MoveXCommand),
    CommandType.MOVE_Y: _CommandSpec(1, _convert_number, MoveYCommand),
    CommandType.SCALE: _CommandSpec(1, _convert_number, ScaleCommand),
    CommandType.VECTOR_SCALE: _CommandSpec(2, _convert_coord, VectorScaleCommand),
    CommandType.ROTATE: _CommandSpec(1, _convert_number, RotateCommand),
    CommandType.COLOR: _CommandSpec(3, _convert_color, ColorCommand),
    CommandType.PARAMETER: _CommandSpec(1, _convert_parameter, ParameterCommand),
}


def _parse_easing(text: Optional[str]) -> Optional[Easing]:
    code = to_number(text)
    if not math.isfinite(code) or not code.is_integer():
        return None
    try:
        return Easing(int(code))
    except ValueError:
        return None


def _fill_missing(start: Sequence[str], end: Sequence[str]) -> List[str]:
    return [value if value.strip() else fallback for value, fallback in zip(start, end)]


def decode_command(entry: Entry) -> List[Command]:
    """Decode one child entry of a scene object into typed commands."""
    with line_context(entry.line):
        tag = entry.values[0]
        if tag == LOOP_TAG:
            return _unroll_loop(entry)
        if tag == TRIGGER_TAG:
            # Triggers are not decoded.
            return []
        return decode_basic_command(entry)


def decode_basic_command(entry: Entry) -> List[Command]:
    """Decode a single-value, standard or sequential form command line."""
    with line_context(entry.line):
        values = entry.values
        easing = _parse_easing(field_at(values, 1))
        if easing is None:
            report_diagnostic(f"Unexpected easing '{field_at(values, 1)}'.")
            return []

        start_time = to_number(field_at(values, 2))
        end_time = _number_or(field_at(values, 3), start_time)

        try:
            command_type = CommandType(values[0])
        except ValueError:
            report_diagnostic(f"Unknown command type '{values[0]}'.")
            return []
        spec = _COMMAND_SPECS[command_type]

        params = values[4:]
        if len(params) < spec.arity or len(params) % spec.arity != 0:
            report_diagnostic(
                f"Command '{command_type.value}' expects a multiple of {spec.arity} "
                f"values, got {len(params)}."
            )
            return []

        keyframes = [
            params[index:index + spec.arity]
            for index in range(0, len(params), spec.arity)
        ]

        try:
            return _build_commands(spec, easing, start_time, end_time, keyframes)
        except ValueError as exc:
            report_diagnostic(str(exc))
            return []


def _build_commands(
    spec: _CommandSpec,
    easing: Easing,
    start_time: float,
    end_time: float,
    keyframes: List[List[str]],
) -> List[Command]:
    if len(keyframes) == 1:
        value = spec.convert(keyframes[0])
        return [spec.command_cls(easing, start_time, end_time, value, value)]

    if len(keyframes) == 2:
        # Standard form: blank start components take the end component.
        return [
            spec.command_cls(
                easing,
                start_time,
                end_time,
                spec.convert(_fill_missing(keyframes[0], keyframes[1])),
                spec.convert(keyframes[1]),
            )
        ]

    # Sequential form: every step reuses the first step's duration.
    converted = [spec.convert(keyframe) for keyframe in keyframes]
    duration = end_time - start_time
    commands: List[Command] = []
    for index in range(len(converted) - 1):
        offset = duration * index
        commands.append(
            spec.command_cls(
                easing,
                start_time + offset,
                end_time + offset,
                converted[index],
                converted[index + 1],
            )
        )
    return commands


def _loop_count(text: Optional[str]) -> int:
    count = to_number(text)
    if not math.isfinite(count) or count <= 0:
        return 0
    return math.ceil(count)


def _unroll_loop(entry: Entry) -> List[Command]:
    children: List[Command] = []
    for child in entry.children:
        children.extend(decode_basic_command(child))
    if not children:
        return []

    loop_start_time = to_number(field_at(entry.values, 1))
    loop_count = _loop_count(field_at(entry.values, 2))
    duration = max(command.end_time for command in children)

    commands: List[Command] = []
    for iteration in range(loop_count):
        iteration_start = loop_start_time + iteration * duration
        commands.extend(
            replace(
                command,
                start_time=command.start_time + iteration_start,
                end_time=command.end_time + iteration_start,
            )
            for command in children
        )
    return commands
