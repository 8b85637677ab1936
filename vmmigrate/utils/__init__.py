"""
vmmigrate 工具模块。

提供日志记录、应用路径和输入验证等工具功能。
"""

from .app_paths import get_app_home
from .logger import get_logger, setup_logger, set_log_level
from .input_validator import InputValidator, InputValidationError

__all__ = [
    "get_app_home",
    "get_logger",
    "setup_logger",
    "set_log_level",
    "InputValidator",
    "InputValidationError",
]
