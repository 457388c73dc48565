"""Real-time meeting participant tracking from ODAS direction-of-arrival estimates."""

__version__ = "0.1.0"
