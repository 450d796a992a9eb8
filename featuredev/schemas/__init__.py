"""Pydantic Schemas — remote payload decoding and facade request validation.

Invariants:
    - Schemas validate at system boundaries (remote responses, facade input)
    - Remote payloads tolerate unknown fields

Design Decisions:
    - One module per contract: remote payloads and facade bodies share field names
"""
