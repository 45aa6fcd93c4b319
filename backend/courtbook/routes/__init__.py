# backend/courtbook/routes/__init__.py
"""HTTP routers."""
