"""tapsite: build toolkit for the Tap & Build marketing website."""

__version__ = "0.1.0"
