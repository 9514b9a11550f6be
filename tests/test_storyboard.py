import math
import textwrap

import pytest

from sbdecode.enums import Easing, Layer
from sbdecode.errors import StoryboardValidationError
from sbdecode.model import Color, ColorCommand, Coord, SpriteObject
from sbdecode.storyboard import StoryboardLoader, load_storyboard


BASE = textwrap.dedent(
    """
    osu file format v14

    [General]
    AudioFilename: audio.mp3

    [Variables]
    $X=5
    $centre=320,240

    [Events]
    //Background and Video events
    0,0,"bg.jpg",0,0
    //Break Periods
    2,10000,12000
    //Storyboard Layer 0 (Background)
    Sprite,Background,Centre,"bg.jpg",320,240
     F,0,0,1000,0,1
    """
)

OVERLAY = textwrap.dedent(
    """
    [Events]
    //Storyboard Layer 3 (Foreground)
    Sprite,Foreground,Centre,"sb/dot.png",$centre
     M,0,0,0,$X,1
    Animation,Foreground,TopLeft,"sb/spin.png",0,0,4,50,LoopOnce
     R,0,0,400,0,6.28
    """
)


def test_end_to_end_color_sprite():
    storyboard = load_storyboard(
        '[Events]\nSprite,Background,Centre,"bg.jpg",0,0\n C,0,100,200,255,0,0,0,255,0'
    )

    assert storyboard is not None
    assert len(storyboard.background) == 1
    sprite = storyboard.background[0]
    assert isinstance(sprite, SpriteObject)
    assert sprite.filepath == "bg.jpg"
    (command,) = sprite.commands
    assert isinstance(command, ColorCommand)
    assert command.easing is Easing.LINEAR
    assert (command.start_time, command.end_time) == (100, 200)
    assert command.start_value == Color(255, 0, 0)
    assert command.end_value == Color(0, 255, 0)
    assert list(storyboard.objects()) == [sprite]


def test_overlay_references_base_variables():
    result = StoryboardLoader().load(BASE, OVERLAY)

    assert result.diagnostics == []
    storyboard = result.storyboard
    assert [obj.filepath for obj in storyboard.background] == ["bg.jpg"]
    dot, spin = storyboard.foreground
    assert dot.default_pos == Coord(320, 240)
    assert dot.commands[0].start_value == Coord(5, 1)
    assert spin.loops is False
    assert spin.frame_count == 4


def test_overlay_without_base_variables_is_not_substituted():
    storyboard = load_storyboard("", "[Events]\nSprite,Pass,Centre,a.png,0,0\n M,0,0,0,$X,1\n")

    (sprite,) = storyboard.passing
    assert math.isnan(sprite.commands[0].start_value.x)


def test_variables_declared_in_overlay_are_rejected():
    overlay = "[Variables]\n$X=5\n[Events]\nSprite,Pass,Centre,a.png,0,0\n"
    with pytest.warns(UserWarning, match="not allowed"):
        result = StoryboardLoader().load(None, overlay)

    assert len(result.storyboard.passing) == 1
    assert result.diagnostics[0].document == "overlay"
    assert result.diagnostics[0].line == 1


def test_objects_are_bucketed_by_layer_in_decode_order():
    base = "[Events]\nSprite,Fail,Centre,a.png,0,0\nSprite,Pass,Centre,b.png,0,0\n"
    overlay = "[Events]\nSprite,Fail,Centre,c.png,0,0\nSprite,Overlay,Centre,d.png,0,0\n"

    storyboard = load_storyboard(base, overlay)

    assert [obj.filepath for obj in storyboard.fail] == ["a.png", "c.png"]
    assert [obj.filepath for obj in storyboard.layer(Layer.PASS)] == ["b.png"]
    assert [obj.filepath for obj in storyboard.overlay] == ["d.png"]
    assert [obj.filepath for obj in storyboard.objects()] == ["a.png", "c.png", "b.png", "d.png"]
    assert storyboard.foreground == []
    assert storyboard.is_empty is False


def test_separate_documents_match_concatenation():
    base = "[Events]\nSprite,Pass,Centre,a.png,0,0\n F,0,0,100,0,1\n"
    overlay = "[Events]\nSprite,Pass,Centre,b.png,1,1\n L,0,2\n  S,0,0,10,1,2\n"

    assert load_storyboard(base, overlay) == load_storyboard(base + overlay)


def test_invalid_layer_does_not_abort_following_entries():
    source = (
        "[Events]\n"
        "Sprite,Middle,Centre,a.png,0,0\n"
        " F,0,0,100,1\n"
        "Sprite,Foreground,Centre,b.png,0,0\n"
    )
    with pytest.warns(UserWarning, match="Invalid value for layer"):
        result = StoryboardLoader().load(source)

    assert [obj.filepath for obj in result.storyboard.foreground] == ["b.png"]
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].document == "base"
    assert result.diagnostics[0].line == 2


def test_no_objects_means_no_storyboard():
    assert load_storyboard(None) is None
    assert load_storyboard("[Events]\n0,0,\"bg.jpg\",0,0\n") is None
    assert StoryboardLoader().load("", "").storyboard is None


def test_single_background_object_is_a_storyboard():
    storyboard = load_storyboard("[Events]\nSprite,Background,Centre,bg.png,0,0\n")

    assert storyboard is not None
    assert not storyboard.is_empty


def test_strict_mode_raises_on_first_diagnostic():
    source = "[Events]\nSprite,Pass,Centre,a.png,0,0\n F,99,0,100,1\n"

    with pytest.raises(StoryboardValidationError, match="Unexpected easing '99'") as excinfo:
        load_storyboard(source, strict=True)

    assert excinfo.value.diagnostic.line == 3
    assert "Location: base line 3" in str(excinfo.value)


def test_dropped_command_keeps_sibling_commands():
    source = "[Events]\nSprite,Pass,Centre,a.png,0,0\n F,99,0,100,1\n F,0,0,100,1\n"

    with pytest.warns(UserWarning, match="Location: base line 3"):
        result = StoryboardLoader().load(source)

    assert len(result.storyboard.passing[0].commands) == 1
    assert str(result.diagnostics[0]).startswith("Unexpected easing '99'.")
