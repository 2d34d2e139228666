"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  Configuration, logging and the record store live in
``core``; request and response models in ``schemas``; business logic in
``services``; and the HTTP routes in ``api/endpoints``.
"""

from .main import app  # noqa: F401
