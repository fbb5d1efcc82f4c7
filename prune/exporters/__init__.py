"""Telemetry exporters for pruning events."""

from .ariadne import AriadneExporter
from .console import ConsoleExporter, NullExporter

__all__ = ["AriadneExporter", "ConsoleExporter", "NullExporter"]
