"""Natural-language intent resolution for chat bot command templates."""

__version__ = "0.1.0"
