"""
Flask Blueprints for the gallery maintenance API
This package contains all route modules organized by functionality
"""

from .system import system_bp

__all__ = [
    'system_bp'
]
