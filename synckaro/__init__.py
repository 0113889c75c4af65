"""SyncKaro - admin console core for a copy-trading platform."""

__version__ = "0.1.0"
