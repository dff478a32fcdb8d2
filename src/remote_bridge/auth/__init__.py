"""
Authentication for Remote Bridge remote clients
"""

from .pin_authenticator import PinAuthenticator

__all__ = ["PinAuthenticator"]
