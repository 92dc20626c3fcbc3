"""relcut: cut a changelog-driven release and publish it to GitHub."""

__version__ = "0.1.0"
