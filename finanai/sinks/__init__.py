"""Event sinks for publishing record changes."""

from finanai.sinks.base import EventSink, emit
from finanai.sinks.console import ConsoleSink

__all__ = ["ConsoleSink", "EventSink", "emit"]
