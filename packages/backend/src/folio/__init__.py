"""Folio: backend for a personal portfolio/CMS site.

Serves the public portfolio content and guards the small admin area
that edits it: JWT login, admin bootstrap, password management.
"""

__version__ = "0.1.0"
