"""
Timeline Interfaces Layer
=========================

Interface adapters (controllers) for the timeline module.
"""

from mantra.timeline.interfaces.controllers import timeline_router

__all__ = ["timeline_router"]
