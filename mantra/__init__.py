"""
Mantra Helpdesk
===============

Helpdesk service: SLA clock, ticket activity timeline, ticket actions and reports.
"""

__version__ = "1.0.0"
