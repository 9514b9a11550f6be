"""Public Python API for sbdecode.

Decodes rhythm-game storyboard scripts (a base ``.osu`` document plus an
optional ``.osb`` overlay) into typed scene objects and animation commands.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from sbdecode.commands import decode_command
from sbdecode.entries import parse_entries
from sbdecode.enums import CommandType, Easing, Layer, Origin, Parameter
from sbdecode.errors import (
    Diagnostic,
    StoryboardError,
    StoryboardValidationError,
    StoryboardWarning,
)
from sbdecode.model import (
    AnimationObject,
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
    SpriteObject,
    Storyboard,
    StoryboardObject,
    VectorScaleCommand,
)
from sbdecode.objects import decode_object
from sbdecode.storyboard import LoadResult, StoryboardLoader, load_storyboard
from sbdecode.variables import VariableTable

try:
    __version__: str = version("sbdecode")
except PackageNotFoundError:  # pragma: no cover - editable local fallback
    __version__ = "0.1.0"


__all__ = [
    "__version__",
    "AnimationObject",
    "Color",
    "ColorCommand",
    "Command",
    "CommandType",
    "Coord",
    "Diagnostic",
    "Easing",
    "Entry",
    "FadeCommand",
    "Layer",
    "LoadResult",
    "MoveCommand",
    "MoveXCommand",
    "MoveYCommand",
    "Origin",
    "Parameter",
    "ParameterCommand",
    "RotateCommand",
    "ScaleCommand",
    "SpriteObject",
    "Storyboard",
    "StoryboardError",
    "StoryboardLoader",
    "StoryboardObject",
    "StoryboardValidationError",
    "StoryboardWarning",
    "VariableTable",
    "VectorScaleCommand",
    "decode_command",
    "decode_object",
    "load_storyboard",
    "parse_entries",
]
