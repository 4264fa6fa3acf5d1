"""
Tickets Module
==============

Bounded Context for ticket actions taken by signed-in users.

Responsibilities:
- Create tickets with an SLA deadline from the urgency level
- Change status, reassign and toggle L3 escalation, each with a comment
- Record every action in the append-only audit log
- Enforce who may act through an explicit request session
"""
