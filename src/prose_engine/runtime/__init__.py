"""Runtime services (telemetry, logging) shared by the engine."""

from . import telemetry

__all__ = ["telemetry"]
