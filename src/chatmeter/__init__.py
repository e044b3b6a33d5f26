"""Usage statistics engine for white-label chat widgets."""

from chatmeter._version import __version__

__all__ = ["__version__"]
