"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    CoasterHandler   /coasters, /coasters/<id>, /coasters/random
    AdminHandler     /admin (HTTP Basic, user "admin")

Handlers are plain classes holding their dependencies (the store, the admin
password) and exposing bound methods that the router calls:

    coasters = CoasterHandler(store)
    router.add_route("/coasters", coasters.collection)

=============================================================================
"""

from .coasters import CoasterHandler
from .admin import AdminHandler

__all__ = [
    "CoasterHandler",
    "AdminHandler",
]
