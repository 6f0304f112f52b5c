"""Utilities 工具包

提供通用基础设施能力：
- logging：统一日志接口
"""
