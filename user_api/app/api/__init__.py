"""
HTTP routes.

``router`` bundles the domain endpoints defined in ``endpoints``; the
application mounts it under ``/api``.
"""
