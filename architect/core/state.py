from enum import Enum


class CycleState(str, Enum):
    IDLE = "idle"
    IDEATING = "ideating"
    BUILDING = "building"
    REVIEWING = "reviewing"
    CLOSING = "closing"
    DONE = "done"
    FAILED = "failed"
