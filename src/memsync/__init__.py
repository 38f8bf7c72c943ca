"""memsync: keep one personal memory template in sync across AI tools."""

__version__ = "0.1.0"
