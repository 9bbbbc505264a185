"""Django project package for the photo contest service (settings, URLs, entrypoints)."""
