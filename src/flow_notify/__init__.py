"""flow-notify: persistent, self-reconciling notification scheduler."""

__version__ = "0.1.0"
