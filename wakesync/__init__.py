"""
wakesync - client-side controller for a wake/sleep scheduling device

The device sleeps between scheduled activations and exposes a small JSON/HTTP
API while it is awake. This package mirrors that API's canonical state and
drives it from a single asyncio event loop.

Core modules:
- utils: Environment-style parsing helpers
- datetime_utils: Timezone offset math and the shared 12/24 hour display rules
- controller: Gateway, state reconciliation, refresh cycles and notifications
"""

__version__ = "0.4.2"
