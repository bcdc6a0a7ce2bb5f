"""ArchLens: interactive clustered dependency graph for microservice proposals."""

__version__ = "0.1.0"
