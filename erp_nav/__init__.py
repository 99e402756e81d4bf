"""
ERP navigation and access resolution.

The engine (``erp_nav.registry`` + ``erp_nav.navigation``) is plain Python with no
FastAPI dependency. ``erp_nav.main`` wires it into a small HTTP service.
"""
