"""
CRUD Boilerplate

Generic REST CRUD endpoints over a document database, plus the
`crudforge-generate` scaffolder that writes new resources.
"""

__version__ = "1.0.0"
