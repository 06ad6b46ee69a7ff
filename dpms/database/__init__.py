from dpms.database.async_db import dispose_engine, get_async_db, get_async_db_context

__all__ = ["get_async_db", "get_async_db_context", "dispose_engine"]
