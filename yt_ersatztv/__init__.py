"""YouTube to ErsatzTV remote stream converter."""

__version__ = "1.0.0"
