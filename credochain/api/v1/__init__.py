"""
API v1 package.

Contains versioned API routes for the credential registry API.
"""

from credochain.api.v1.routes import router

__all__ = ["router"]
