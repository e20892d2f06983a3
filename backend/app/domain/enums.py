"""Domain enumerations for strong typing & validation."""
from enum import Enum

class GestureKind(str, Enum):
    MOVE = "move"
    RESIZE_START = "resize-start"
    RESIZE_END = "resize-end"

class DragPhase(str, Enum):
    IDLE = "Idle"
    DRAGGING = "Dragging"
    DROPPED = "Dropped"
    CANCELLED = "Cancelled"

class DropView(str, Enum):
    GRID = "grid"    # assignee + date (+ time-of-day)
    MONTH = "month"  # date only
    DAY = "day"      # time-of-day only

class Orientation(str, Enum):
    HORIZONTAL = "horizontal"  # timeline rows
    VERTICAL = "vertical"      # day view column

class NavDirection(str, Enum):
    PREV = "prev"
    NEXT = "next"

class TaskColor(str, Enum):
    BLUE = "bg-blue-500"
    GREEN = "bg-green-500"
    PURPLE = "bg-purple-500"
    ORANGE = "bg-orange-500"
    PINK = "bg-pink-500"
    CYAN = "bg-cyan-500"
    RED = "bg-red-500"
    YELLOW = "bg-yellow-500"
    INDIGO = "bg-indigo-500"
    TEAL = "bg-teal-500"
