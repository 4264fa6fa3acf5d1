"""
Tickets Interfaces Layer
========================

Interface adapters (controllers) for the tickets module.
"""

from mantra.tickets.interfaces.controllers import tickets_router, urgency_levels_router

__all__ = ["tickets_router", "urgency_levels_router"]
