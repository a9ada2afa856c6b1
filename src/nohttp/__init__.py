"""nohttp — find (and fix) insecure http:// references in a source tree."""

__version__ = "0.1.0"
