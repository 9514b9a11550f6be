from enum import Enum, IntEnum


class Easing(IntEnum):
    LINEAR = 0
    OUT = 1
    IN = 2
    IN_QUAD = 3
    OUT_QUAD = 4
    IN_OUT_QUAD = 5
    IN_CUBIC = 6
    OUT_CUBIC = 7
    IN_OUT_CUBIC = 8
    IN_QUART = 9
    OUT_QUART = 10
    IN_OUT_QUART = 11
    IN_QUINT = 12
    OUT_QUINT = 13
    IN_OUT_QUINT = 14
    IN_SINE = 15
    OUT_SINE = 16
    IN_OUT_SINE = 17
    IN_EXPO = 18
    OUT_EXPO = 19
    IN_OUT_EXPO = 20
    IN_CIRC = 21
    OUT_CIRC = 22
    IN_OUT_CIRC = 23
    IN_ELASTIC = 24
    OUT_ELASTIC = 25
    OUT_ELASTIC_HALF = 26
    OUT_ELASTIC_QUARTER = 27
    IN_OUT_ELASTIC = 28
    IN_BACK = 29
    OUT_BACK = 30
    IN_OUT_BACK = 31
    IN_BOUNCE = 32
    OUT_BOUNCE = 33
    IN_OUT_BOUNCE = 34


class Layer(Enum):
    BACKGROUND = "Background"
    FAIL = "Fail"
    PASS = "Pass"
    FOREGROUND = "Foreground"
    OVERLAY = "Overlay"


# Declared by the format but not decoded into any bucket.
UNSUPPORTED_LAYERS = frozenset({"Samples"})


class Origin(Enum):
    TOP_LEFT = "TopLeft"
    CENTRE = "Centre"
    CENTRE_LEFT = "CentreLeft"
    TOP_RIGHT = "TopRight"
    BOTTOM_CENTRE = "BottomCentre"
    TOP_CENTRE = "TopCentre"
    CUSTOM = "Custom"
    CENTRE_RIGHT = "CentreRight"
    BOTTOM_LEFT = "BottomLeft"
    BOTTOM_RIGHT = "BottomRight"


class Parameter(Enum):
    FLIP_HORIZONTAL = "H"
    FLIP_VERTICAL = "V"
    ADDITIVE = "A"


class CommandType(Enum):
    FADE = "F"
    MOVE = "M"
    MOVE_X = "MX"
    MOVE_Y = "MY"
    SCALE = "S"
    VECTOR_SCALE = "V"
    ROTATE = "R"
    COLOR = "C"
    PARAMETER = "P"
