"""amdguard: find state kept in the module scope of AMD modules."""

__version__ = "0.1.0"
