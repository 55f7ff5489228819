"""
WhatsApp Cloud API relay.

Keep package import side-effects to a minimum; the router pulls in the
database and assistant layers, so it is not imported here.
"""

__all__ = [
    "config",
    "client",
    "webhook",
    "router",
]
