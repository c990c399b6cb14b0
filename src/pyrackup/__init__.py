"""
pyrackup - bootstrap and serve WSGI applications

Loads an application from a rackup file, wraps it in the middleware stack
for the active environment, and runs it under a server adapter with pid-file
locking, optional daemonization and signal-driven shutdown.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
