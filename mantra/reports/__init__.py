"""
Reports Module
==============

Bounded Context for aggregate ticket reporting.

Responsibilities:
- Created vs closed and SLA breach series per day
- Category heatmap and per-agent status table
- Weekly and all-time status summary
- CSV export of filtered tickets
"""
