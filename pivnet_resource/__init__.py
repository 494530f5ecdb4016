"""Pipeline resource for releases on Pivotal Network."""

__version__ = "0.3.0"
