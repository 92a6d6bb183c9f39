"""
Note Service: API Routes Package
==================================

Route Inventory:
    - notes.py:  /notes, /notes/list, /notes/get, /notes/create,
                 /notes/update, /notes/delete

Routes stay thin: parse the request, call the store once, encode the result.
"""
