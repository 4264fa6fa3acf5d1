"""
SLA Module
==========

Bounded Context for ticket SLA deadlines and countdowns.

Responsibilities:
- Derive a deadline from the urgency level's SLA hours
- Classify tickets as on track, overdue, resolved on time or resolved late
- Render the live countdown shown next to open tickets
- Sweep open tickets in the background and log new breaches
- Hot-reload helpdesk rules (priority bands, merge window) via watchdog
"""

__version__ = "1.0.0"
