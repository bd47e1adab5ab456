from .settings import Settings, TABLES, load_settings

__all__ = ["Settings", "TABLES", "load_settings"]
