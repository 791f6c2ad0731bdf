"""OAuth 2.0 credential server: dynamic registration, PKCE authorization codes and bearer tokens."""

__version__ = "0.1.0"
