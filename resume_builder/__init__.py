"""Resume Builder - YAML resume storage, versioning and multi-resume indexing."""

__version__ = "0.1.0"
