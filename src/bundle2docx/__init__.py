"""bundle2docx: turn an HTML bundle (HTML + images + stylesheets) into a DOCX file."""

__version__ = "0.3.0"

__all__ = ["__version__"]
