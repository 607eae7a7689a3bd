"""Assessment content registry: tabular import pipeline and activation gates."""

__version__ = "0.1.0"
