"""Newsletter subscription service: double opt-in registration and newsletter delivery."""

__version__ = "0.1.0"
