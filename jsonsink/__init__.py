"""JSON sink reporter: forwards metric samples to an HTTP sink."""

__version__ = "0.1.0"
