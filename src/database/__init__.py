from .db_session import Base, Database, database, get_db

__all__ = ["Base", "Database", "database", "get_db"]
