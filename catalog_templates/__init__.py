"""Channel-graph synthesis and splicing templates for declarative operator catalogs."""

__version__ = "0.3.0"
