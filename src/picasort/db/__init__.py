"""
picasort.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide engine construction and connection URLs for PostgreSQL.
"""

# --- Module Notes -----------------------------------------------------------
# Schema DDL is not managed here; provisioning only creates the empty database.
