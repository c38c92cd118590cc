"""
SQLAlchemy ORM models package.

All models are imported here so that Base.metadata knows about every
table before create_all() runs at start-up.
"""

from club_finance.models.document import StoredDocument  # noqa: F401
