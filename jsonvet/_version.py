"""Version of the jsonvet package."""

version = "0.4.0"
__version__ = version
