"""Database Package — SQLAlchemy declarative Base shared by all ledger tables."""
