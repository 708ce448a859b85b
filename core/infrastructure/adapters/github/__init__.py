"""GitHub adapters.

Import the aiohttp-backed client from its module when needed.
"""

__all__ = []
