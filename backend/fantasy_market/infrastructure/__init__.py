"""Infrastructure Layer — ledger store, logging, and outbound notification.

Invariants:
    - Infrastructure never imports from services/
    - All SQLAlchemy failures mapped to MarketError subclasses before leaving this layer
"""
