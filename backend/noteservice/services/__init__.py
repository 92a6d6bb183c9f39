"""
Note Service: Services Layer
==============================

Service Inventory:
    - NoteStore (abstract): persistence contract used by the routes
    - SqlNoteStore: implementation over a relational database
"""
