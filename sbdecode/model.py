from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterator, List, Optional, Union

from sbdecode.enums import CommandType, Easing, Layer, Origin, Parameter


@dataclass
class Entry:
    """A comma-split source line and the lines nested directly below it."""

    values: List[str]
    children: List["Entry"] = field(default_factory=list)
    line: Optional[int] = None


@dataclass(frozen=True)
class Coord:
    x: float
    y: float


@dataclass(frozen=True)
class Color:
    r: float
    g: float
    b: float


# Commands

@dataclass(frozen=True)
class Command:
    easing: Easing
    start_time: float
    end_time: float
    start_value: object
    end_value: object

    kind: ClassVar[CommandType]


@dataclass(frozen=True)
class FadeCommand(Command):
    start_value: float
    end_value: float

    kind: ClassVar[CommandType] = CommandType.FADE


@dataclass(frozen=True)
class MoveCommand(Command):
    start_value: Coord
    end_value: Coord

    kind: ClassVar[CommandType] = CommandType.MOVE


@dataclass(frozen=True)
class MoveXCommand(Command):
    start_value: float
    end_value: float

    kind: ClassVar[CommandType] = CommandType.MOVE_X


@dataclass(frozen=True)
class MoveYCommand(Command):
    start_value: float
    end_value: float

    kind: ClassVar[CommandType] = CommandType.MOVE_Y


@dataclass(frozen=True)
class ScaleCommand(Command):
    start_value: float
    end_value: float

    kind: ClassVar[CommandType] = CommandType.SCALE


@dataclass(frozen=True)
class VectorScaleCommand(Command):
    start_value: Coord
    end_value: Coord

    kind: ClassVar[CommandType] = CommandType.VECTOR_SCALE


@dataclass(frozen=True)
class RotateCommand(Command):
    start_value: float
    end_value: float

    kind: ClassVar[CommandType] = CommandType.ROTATE


@dataclass(frozen=True)
class ColorCommand(Command):
    start_value: Color
    end_value: Color

    kind: ClassVar[CommandType] = CommandType.COLOR


@dataclass(frozen=True)
class ParameterCommand(Command):
    start_value: Parameter
    end_value: Parameter

    kind: ClassVar[CommandType] = CommandType.PARAMETER


# Scene objects

@dataclass(frozen=True)
class _ObjectBase:
    layer: Layer
    origin: Origin
    filepath: str
    default_pos: Coord
    commands: List[Command]

    @property
    def start_time(self) -> Optional[float]:
        """Earliest command start, or ``None`` for an object without commands."""
        if not self.commands:
            return None
        return min(command.start_time for command in self.commands)

    @property
    def end_time(self) -> Optional[float]:
        if not self.commands:
            return None
        return max(command.end_time for command in self.commands)


@dataclass(frozen=True)
class SpriteObject(_ObjectBase):
    pass


@dataclass(frozen=True)
class AnimationObject(_ObjectBase):
    frame_count: float
    frame_delay: float
    loops: bool


StoryboardObject = Union[SpriteObject, AnimationObject]


@dataclass(frozen=True)
class Storyboard:
    background: List[StoryboardObject] = field(default_factory=list)
    fail: List[StoryboardObject] = field(default_factory=list)
    passing: List[StoryboardObject] = field(default_factory=list)
    foreground: List[StoryboardObject] = field(default_factory=list)
    overlay: List[StoryboardObject] = field(default_factory=list)

    def layer(self, layer: Layer) -> List[StoryboardObject]:
        """Return the ordered object list for one rendering layer."""
        return {
            Layer.BACKGROUND: self.background,
            Layer.FAIL: self.fail,
            Layer.PASS: self.passing,
            Layer.FOREGROUND: self.foreground,
            Layer.OVERLAY: self.overlay,
        }[layer]

    def objects(self) -> Iterator[StoryboardObject]:
        """Iterate every object, layer by layer in rendering order."""
        for layer in Layer:
            yield from self.layer(layer)

    @property
    def is_empty(self) -> bool:
        return not any(self.layer(layer) for layer in Layer)
