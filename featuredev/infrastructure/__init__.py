"""Infrastructure Layer — remote client, telemetry sink, and logging setup.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All remote calls wrapped with retry/timeout/error decoding

Design Decisions:
    - Thin transport over httpx: the service owns classification, not the client
"""
