"""
Timeline Module
===============

Bounded Context for the ticket activity timeline.

Merges a ticket's comments and audit log entries into one newest-first
narrative, folding a comment into the audit entry it was written with.
"""
