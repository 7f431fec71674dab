"""wavalidate — batch phone number validation against a messaging directory."""

__version__ = "0.1.0"
