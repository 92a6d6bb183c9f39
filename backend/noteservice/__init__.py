"""
Note Service: Application Package
===================================

Layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP decoding/encoding only
    ├─────────────────────────────────────┤
    │       NoteStore (Interface)         │  ← six persistence operations
    ├─────────────────────────────────────┤
    │       SqlNoteStore (Persistence)    │  ← parameterized SQL, async engine
    └─────────────────────────────────────┘

Routes never see SQL, and the store never sees HTTP.
"""

__version__ = "1.0.0"
