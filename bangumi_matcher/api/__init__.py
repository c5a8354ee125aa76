from .resolve_routes import router

__all__ = ['router']
