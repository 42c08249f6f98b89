from phiguard.api.main import app

__all__ = ["app"]
