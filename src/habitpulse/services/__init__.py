"""Habit scheduling, ledger, streak and statistics services.

Submodules: ``calendar``, ``recurrence``, ``ledger``, ``streaks``, ``stats``,
``snapshot`` and ``tracker``. They are imported explicitly by callers so the
domain layer can depend on ``calendar`` without pulling in the rest.
"""
