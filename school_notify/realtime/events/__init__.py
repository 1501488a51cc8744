"""Domain-specific realtime publishers.

These modules only build payloads and emit them from sync Django code.
Connection handling lives in :mod:`school_notify.realtime.hub`.
"""
