"""Pluggable async storage backends for a content-addressed build artifact cache."""

__version__ = "0.1.0"
