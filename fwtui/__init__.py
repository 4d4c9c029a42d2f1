"""Terminal user interface for managing the UFW firewall: rules, default policies and application profiles."""

__version__ = "0.1.0"