"""控制器模块 - 分离画布的业务逻辑"""

from .dynamic_height_reflow_controller import DynamicHeightReflowController

__all__ = [
    'DynamicHeightReflowController',
]
