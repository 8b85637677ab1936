"""
vmmigrate 核心模块。

提供迁移提供器接口、线程安全注册表、配置管理和迁移管理功能。
"""

from .interfaces import IMigrationProvider, DetectedVersion, MigrationError, DetectionError
from .registry import (
    MigrationRegistry,
    RegistryError,
    ProviderAlreadyRegisteredError,
    ProviderNotFoundError,
    InvalidProviderError,
    get_registry,
)
from .config_manager import ConfigManager, ConfigValidationError, ConfigLoadError, ConfigSaveError
from .migration_manager import MigrationManager, ProviderScanResult, CleanupPlan, UninstallError
from . import path_utils
from . import version_probe
from . import version_utils

__all__ = [
    "IMigrationProvider", "DetectedVersion", "MigrationError", "DetectionError",
    "MigrationRegistry", "RegistryError", "ProviderAlreadyRegisteredError",
    "ProviderNotFoundError", "InvalidProviderError", "get_registry",
    "ConfigManager", "ConfigValidationError", "ConfigLoadError", "ConfigSaveError",
    "MigrationManager", "ProviderScanResult", "CleanupPlan", "UninstallError",
    "path_utils",
    "version_probe",
    "version_utils",
]
