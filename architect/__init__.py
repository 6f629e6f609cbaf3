"""Architect: an autonomous pipeline that ideates, builds, reviews and stores app projects."""

from architect.core.cycle_driver import CycleDriver
from architect.core.orchestrator import Orchestrator

__all__ = ["CycleDriver", "Orchestrator"]
