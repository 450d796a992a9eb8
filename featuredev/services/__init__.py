"""Services Layer — feature-dev adapter, error classification, polling, wiring.

Invariants:
    - Every remote failure leaves this layer as a FeatureDevError
    - Error classification is pure (error_mapping.py); the service logs and raises

Design Decisions:
    - Client and telemetry sink injected into FeatureDevService (no globals inside it)
"""
