"""Built-in dialect descriptors."""
from dialectql.dialects import hsqldb, vertica

BUILTIN_DIALECTS = (hsqldb.DESCRIPTOR, vertica.DESCRIPTOR)

__all__ = ["BUILTIN_DIALECTS", "hsqldb", "vertica"]
