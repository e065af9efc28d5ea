"""
Scheduled notification subsystem.

Components:
- models.py: data structures (ScheduleRecord, Recurrence) and payload checks
- recurrence.py: next-occurrence arithmetic for recurring chains
- persistence.py: snapshot load/save on top of a key-value storage
- dispatch.py: NotificationEvent + observer registry for renderers
- scheduler.py: timers, reconciliation, firing and the 50-record cap
- api.py: small high-level helpers used by the rest of the app
"""
