"""Mac cleanup agents: SDK retention and developer cache reclamation."""

__version__ = "0.1.0"
