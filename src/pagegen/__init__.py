"""pagegen: generate and maintain documents from CSV rows and a template document."""

__version__ = "0.1.0"
