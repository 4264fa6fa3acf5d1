"""
Shared Kernel Module
====================

Shared infrastructure used across all bounded contexts (SLA, Timeline,
Tickets and Reports).

Architecture Pattern: Modular Monolith
- Each module is a bounded context
- Shared kernel contains only generic infrastructure and the timestamp
  primitives every context relies on

DO NOT add ticket business logic to the shared kernel.
"""

__version__ = "1.0.0"
