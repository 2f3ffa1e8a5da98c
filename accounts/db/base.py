"""
Users table definition.
Challenge: The column set depends on the hashing scheme (salted KDF needs a salt column).
Design: SQLAlchemy Core table built once per Users instance from the hasher's requires_salt flag.
"""

from sqlalchemy import Column, Integer, MetaData, Table, Text


def build_users_table(metadata: MetaData, *, with_salt: bool, name: str = "users") -> Table:
    """id (autoincrement primary key), username (unique), hash, and salt only when with_salt."""
    columns = [
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("username", Text, nullable=False, unique=True),
        Column("hash", Text, nullable=False),
    ]
    if with_salt:
        columns.append(Column("salt", Text, nullable=False))
    return Table(name, metadata, *columns)
