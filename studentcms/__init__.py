"""studentcms: single-user command-line database for student records."""

__version__ = "1.0.0"
