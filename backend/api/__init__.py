"""
Mindcare API package.

Provides the FastAPI application for the provisioning service. The
application itself lives in ``api.app``.
"""
