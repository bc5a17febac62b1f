"""Event store client data model, request building and response decoding."""

__version__ = "0.1.0"