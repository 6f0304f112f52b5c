"""配置子包

例如: from engine.configs.settings import settings
"""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
