"""
NoteShare Backend - Services Layer
====================================

Orchestrators:
    - AuthService: register / login / verify over the identity collaborator
    - NoteService: upload → store → OCR → catalog, filtered listing

Collaborators (abstract contract + implementations):
    - IdentityProvider: SupabaseIdentityProvider
    - ObjectStorage:    SupabaseObjectStorage, LocalObjectStorage
    - CatalogStore:     SqlCatalogStore
    - OCREngine:        TesseractOCREngine, GeminiOCREngine
"""
