"""Merch Archive - a community catalog of band merchandise."""

__version__ = "0.1.0"
