"""GDM Assist — clinical decision support for gestational diabetes."""

__version__ = "1.0.0"
