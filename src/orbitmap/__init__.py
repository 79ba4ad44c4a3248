"""orbitmap: layered orbit maps of assistant configuration and project files."""

__version__ = "0.1.0"
