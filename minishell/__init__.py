"""Shell internals: built-ins, expansion, PATH lookup, redirections, here-documents and pipelines."""

__version__ = "0.1.0"