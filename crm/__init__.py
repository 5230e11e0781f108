"""Simple CRM backend: JWT auth, role-gated user/customer CRUD, SQL migrations."""

__version__ = "0.1.0"
