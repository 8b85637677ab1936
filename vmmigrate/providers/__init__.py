"""
内置迁移提供器模块。

提供器不在导入时自行注册，而是由 register_builtin_providers 统一构造并注册，
注册顺序固定。
"""

from typing import List, Optional

from vmmigrate.core.interfaces import IMigrationProvider
from vmmigrate.core.registry import (
    MigrationRegistry,
    ProviderAlreadyRegisteredError,
    get_registry,
)
from vmmigrate.core.version_probe import DEFAULT_TIMEOUT
from vmmigrate.utils.logger import get_logger

from .node_providers import FnmProvider, NvmProvider
from .python_providers import PyenvProvider, SystemPythonProvider
from .ruby_providers import (
    ChrubyProvider,
    RbenvProvider,
    RvmProvider,
    SystemRubyProvider,
    UruProvider,
)

logger = get_logger()


def builtin_providers(
    shims_dir: Optional[str] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> List[IMigrationProvider]:
    """
    构造所有内置提供器。

    参数:
        shims_dir: 系统提供器查找 PATH 时需要排除的 shims 目录
        timeout: 系统提供器的版本探测超时时间（秒）

    返回:
        提供器列表，顺序固定
    """
    return [
        NvmProvider(),
        FnmProvider(),
        PyenvProvider(),
        SystemPythonProvider(shims_dir=shims_dir, timeout=timeout),
        RbenvProvider(),
        RvmProvider(),
        ChrubyProvider(),
        UruProvider(),
        SystemRubyProvider(shims_dir=shims_dir, timeout=timeout),
    ]


def register_builtin_providers(
    registry: Optional[MigrationRegistry] = None,
    shims_dir: Optional[str] = None,
    strict: bool = True,
    timeout: int = DEFAULT_TIMEOUT,
) -> List[str]:
    """
    将内置提供器注册到注册表。

    参数:
        registry: 目标注册表，默认为进程级默认注册表
        shims_dir: 系统提供器需要排除的 shims 目录
        strict: 为 True 时重复注册视为编程错误并抛出异常，为 False 时记录日志后跳过
        timeout: 系统提供器的版本探测超时时间（秒）

    返回:
        实际注册成功的提供器名称列表

    抛出:
        ProviderAlreadyRegisteredError: strict 为 True 且名称重复
    """
    target = registry if registry is not None else get_registry()
    registered = []

    for provider in builtin_providers(shims_dir=shims_dir, timeout=timeout):
        try:
            target.register(provider)
        except ProviderAlreadyRegisteredError:
            if strict:
                logger.error(f"内置提供器重复注册: {provider.name()}")
                raise
            logger.debug(f"内置提供器已存在，跳过: {provider.name()}")
            continue
        registered.append(provider.name())

    logger.debug(f"已注册 {len(registered)} 个内置迁移提供器")
    return registered


__all__ = [
    "builtin_providers",
    "register_builtin_providers",
    "NvmProvider",
    "FnmProvider",
    "PyenvProvider",
    "SystemPythonProvider",
    "RbenvProvider",
    "RvmProvider",
    "ChrubyProvider",
    "UruProvider",
    "SystemRubyProvider",
]
