"""Weekly inventory spreadsheet editing: column inference, movements, export."""

__version__ = "0.1.0"
