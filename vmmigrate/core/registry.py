"""
迁移提供器注册表模块。

提供线程安全的提供器注册表，以及进程级默认注册表的便捷访问函数。
"""

import threading
from typing import Dict, List

from vmmigrate.core.interfaces import IMigrationProvider, MigrationError
from vmmigrate.utils.input_validator import InputValidator, InputValidationError
from vmmigrate.utils.logger import get_logger

logger = get_logger()


class RegistryError(MigrationError):
    """注册表错误异常。"""
    pass


class ProviderAlreadyRegisteredError(RegistryError):
    """提供器名称重复注册错误异常。"""

    def __init__(self, name: str):
        super().__init__(f"迁移提供器 '{name}' 已注册")
        self.name = name


class ProviderNotFoundError(RegistryError):
    """提供器未找到错误异常。"""

    def __init__(self, name: str):
        super().__init__(f"迁移提供器 '{name}' 未找到")
        self.name = name


class InvalidProviderError(RegistryError):
    """提供器名称无效错误异常。"""
    pass


class MigrationRegistry:
    """
    迁移提供器注册表类。

    以提供器名称为键保存提供器实例。所有操作都在同一把锁内完成，
    查询结果均为新建列表，调用方无法修改内部映射。
    """

    def __init__(self):
        """初始化空注册表。"""
        self._providers: Dict[str, IMigrationProvider] = {}
        self._lock = threading.Lock()

    def register(self, provider: IMigrationProvider) -> None:
        """
        注册迁移提供器。

        参数:
            provider: 提供器实例

        抛出:
            InvalidProviderError: 提供器名称无效
            ProviderAlreadyRegisteredError: 同名提供器已存在，注册表保持不变
        """
        name = provider.name()
        try:
            InputValidator.validate_provider_name(name)
        except InputValidationError as e:
            raise InvalidProviderError(str(e)) from e

        with self._lock:
            if name in self._providers:
                raise ProviderAlreadyRegisteredError(name)
            self._providers[name] = provider
        logger.debug(f"已注册迁移提供器: {name} (runtime={provider.runtime()})")

    def unregister(self, name: str) -> None:
        """
        移除迁移提供器。

        参数:
            name: 提供器名称

        抛出:
            ProviderNotFoundError: 提供器不存在
        """
        with self._lock:
            if name not in self._providers:
                raise ProviderNotFoundError(name)
            del self._providers[name]
        logger.debug(f"已移除迁移提供器: {name}")

    def get(self, name: str) -> IMigrationProvider:
        """
        按名称获取迁移提供器。

        参数:
            name: 提供器名称

        返回:
            提供器实例

        抛出:
            ProviderNotFoundError: 提供器不存在
        """
        with self._lock:
            provider = self._providers.get(name)
        if provider is None:
            raise ProviderNotFoundError(name)
        return provider

    def has(self, name: str) -> bool:
        """检查指定名称的提供器是否已注册。"""
        with self._lock:
            return name in self._providers

    def get_by_runtime(self, runtime: str) -> List[IMigrationProvider]:
        """
        获取管理指定运行时的所有提供器，顺序不保证。

        参数:
            runtime: 运行时名称

        返回:
            提供器列表，没有匹配时为空列表
        """
        with self._lock:
            return [p for p in self._providers.values() if p.runtime() == runtime]

    def list_names(self) -> List[str]:
        """返回所有已注册的提供器名称，顺序不保证。"""
        with self._lock:
            return list(self._providers.keys())

    def get_all(self) -> List[IMigrationProvider]:
        """返回所有已注册的提供器，顺序不保证。"""
        with self._lock:
            return list(self._providers.values())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        with self._lock:
            return len(self._providers)


_default_registry = MigrationRegistry()


def get_registry() -> MigrationRegistry:
    """返回进程级默认注册表。"""
    return _default_registry


def register(provider: IMigrationProvider) -> None:
    """向默认注册表注册提供器。"""
    _default_registry.register(provider)


def unregister(name: str) -> None:
    """从默认注册表移除提供器。"""
    _default_registry.unregister(name)


def get(name: str) -> IMigrationProvider:
    """从默认注册表获取提供器。"""
    return _default_registry.get(name)


def has(name: str) -> bool:
    """检查默认注册表中是否存在提供器。"""
    return _default_registry.has(name)


def get_by_runtime(runtime: str) -> List[IMigrationProvider]:
    """从默认注册表获取指定运行时的提供器。"""
    return _default_registry.get_by_runtime(runtime)


def list_names() -> List[str]:
    """返回默认注册表中的所有提供器名称。"""
    return _default_registry.list_names()


def get_all() -> List[IMigrationProvider]:
    """返回默认注册表中的所有提供器。"""
    return _default_registry.get_all()
