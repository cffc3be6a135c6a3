"""
NoteShare Backend - API Routes Package
========================================

Route Inventory:
    - auth.py:        POST /register, POST /login, POST /verify
    - notes.py:       POST /upload-note, GET /notes
    - diagnostics.py: GET  /test-db-access
    - health.py:      GET  /health
    - files.py:       GET  /storage/v1/object/public/{bucket}/{name} (local storage only)
    - frontend.py:    GET  /{path} (front-end fallback, registered last)

Routes stay thin: extract request data, call a service, wrap the result.
"""
