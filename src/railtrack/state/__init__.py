"""State layer.

This package is the single owner of the live composite state: position
fix, nearest waypoint, signal table and emergency-stop record. Every
mutation produces a :class:`railtrack.state.events.ChangeEvent`.
"""
