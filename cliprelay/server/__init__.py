"""
FastAPI application serving the relay endpoint
"""
from .app import create_app

__all__ = ['create_app']
