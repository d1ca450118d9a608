"""Avatar voice collection: persistence and consistency layer."""

__version__ = "0.1.0"
