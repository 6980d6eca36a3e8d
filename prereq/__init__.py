"""prereq: cross-repository pull request dependency checks."""

__version__ = "0.1.0"
