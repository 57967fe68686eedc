from madrasa.api.main import app

__all__ = ["app"]
