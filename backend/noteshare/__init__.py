"""
NoteShare Backend - Application Package
=========================================

Layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (AuthService, NoteService)│  ← Orchestration, error mapping
    ├─────────────────────────────────────┤
    │  Collaborators (identity, storage,  │  ← Supabase, SQLAlchemy,
    │  catalog, OCR) via ServiceContext   │    Tesseract/Gemini
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
