"""
输入验证模块。

提供提供器名称、运行时名称和版本号等用户输入的验证功能。
"""

import re
from typing import Any, Dict

from vmmigrate.utils.logger import get_logger

logger = get_logger()


class InputValidationError(Exception):
    """输入验证错误异常。"""
    pass


class InputValidator:
    """
    输入验证器类。

    卸载命令会拼接版本号后交给子进程执行，因此版本号只允许安全字符。
    """

    PROVIDER_NAME_PATTERN = re.compile(r'^[a-z0-9][a-z0-9._-]*$')
    RUNTIME_NAME_PATTERN = re.compile(r'^[a-z0-9][a-z0-9_-]*$')
    VERSION_PATTERN = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9._+-]*$')
    MAX_NAME_LENGTH = 50
    MAX_VERSION_LENGTH = 100

    @classmethod
    def validate_provider_name(cls, name: str) -> bool:
        """
        验证提供器名称的有效性。

        参数:
            name: 提供器名称

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not name or not name.strip():
            raise InputValidationError("提供器名称不能为空")

        if len(name) > cls.MAX_NAME_LENGTH:
            raise InputValidationError(f"提供器名称不能超过 {cls.MAX_NAME_LENGTH} 个字符")

        if not cls.PROVIDER_NAME_PATTERN.match(name):
            raise InputValidationError(f"提供器名称只能包含小写字母、数字、点、下划线和连字符: {name!r}")

        return True

    @classmethod
    def validate_runtime_name(cls, runtime: str) -> bool:
        """
        验证运行时名称的有效性。

        参数:
            runtime: 运行时名称

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not runtime or not runtime.strip():
            raise InputValidationError("运行时名称不能为空")

        if len(runtime) > cls.MAX_NAME_LENGTH:
            raise InputValidationError(f"运行时名称不能超过 {cls.MAX_NAME_LENGTH} 个字符")

        if not cls.RUNTIME_NAME_PATTERN.match(runtime):
            raise InputValidationError(f"运行时名称格式无效: {runtime!r}")

        return True

    @classmethod
    def sanitize_name(cls, name: str) -> str:
        """去除首尾空白并转换为小写。"""
        if not name:
            return ""
        return name.strip().lower()

    @classmethod
    def validate_version_string(cls, version: str) -> bool:
        """
        验证版本号字符串的有效性。

        参数:
            version: 版本号字符串

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not version or not version.strip():
            raise InputValidationError("版本号不能为空")

        if len(version.strip()) > cls.MAX_VERSION_LENGTH:
            raise InputValidationError(f"版本号不能超过 {cls.MAX_VERSION_LENGTH} 个字符")

        if not cls.VERSION_PATTERN.match(version.strip()):
            raise InputValidationError(f"版本号格式无效: {version!r}")

        return True

    @classmethod
    def sanitize_version_string(cls, version: str) -> str:
        """
        sanitize 版本号字符串，去掉首尾空白和前导 v。

        参数:
            version: 原始版本号字符串

        返回:
            sanitized 后的版本号字符串
        """
        if not version:
            return ""
        version = version.strip()
        if version[:1] in ("v", "V") and version[1:2].isdigit():
            version = version[1:]
        return version

    @classmethod
    def safe_get_config_value(cls, config: Dict[str, Any], key: str, default: Any = None) -> Any:
        """
        安全地获取嵌套配置值，键以点号分隔。

        参数:
            config: 配置字典
            key: 配置键（如 settings.shims_dir）
            default: 默认值

        返回:
            配置值或默认值
        """
        value: Any = config
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value
