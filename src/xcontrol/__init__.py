"""xcontrol-lint: parser and diagnostics for xTB xcontrol input files."""

__version__ = "0.1.0"
