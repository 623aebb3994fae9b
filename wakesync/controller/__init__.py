"""
Device controller for the wake/sleep scheduling device

This package keeps a read-mostly cache of the device's canonical state and
writes operator changes through to it:

- Gateway: One JSON round trip per call, failures collapse to a Failure sentinel
- Clock: Timezone/DST-aware time sync and the 1 second clock refresh
- Modes: Set times, regular interval and random interval scheduling
- Alarms: Explicit wake times, replaced wholesale after every mutation
- Events: Past 24 hours of device events with aggregate counters
- Refresh: Independently paced refresh cycles (1s clock, 60s mode, 300s history)
- Notifications: Single-slot, auto-dismissing status messages

Key modules:
- config: Configuration from environment variables
- state: Data model, pure reducers and the ticketed state store
- app: WakeController wiring and the dispatch entry point
- view: Pure rendering of state for front ends
"""

from __future__ import annotations

__all__ = [
    "alarms",
    "app",
    "clock",
    "config",
    "device",
    "events",
    "gateway",
    "modes",
    "notifications",
    "refresh",
    "state",
    "view",
]
