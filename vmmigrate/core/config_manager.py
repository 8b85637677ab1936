"""
配置管理器模块。

提供应用程序配置的加载、保存和验证功能。
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, List, Optional

from vmmigrate.utils.app_paths import get_app_home
from vmmigrate.utils.logger import get_logger

logger = get_logger()

DUPLICATE_STRICT = "strict"
DUPLICATE_IGNORE = "ignore"


class ConfigValidationError(Exception):
    """配置验证错误异常。"""
    pass


class ConfigLoadError(Exception):
    """配置加载错误异常。"""
    pass


class ConfigSaveError(Exception):
    """配置保存错误异常。"""
    pass


def _atomic_save_json(file_path: Path, data: Any, indent: int = 2) -> None:
    """
    原子保存 JSON 数据到文件，防止写入中断导致文件损坏。

    参数:
        file_path: 目标文件路径
        data: 要保存的数据
        indent: JSON 缩进
    """
    temp_path = file_path.with_suffix(file_path.suffix + ".tmp")

    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        os.replace(temp_path, file_path)
    except (OSError, TypeError, ValueError):
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                logger.debug(f"无法删除临时文件: {temp_path}")
        raise


class ConfigManager:
    """
    配置管理器类。

    负责管理应用程序配置的加载、保存、验证和访问。
    配置文件不存在时使用内置默认配置，只有显式保存时才写入磁盘。
    """

    CONFIG_FILE_NAME = "config.json"

    REQUIRED_FIELDS = {
        "settings": dict,
    }

    SETTINGS_FIELDS = {
        "shims_dir": str,
        "duplicate_registration": str,
        "disabled_providers": list,
        "version_probe_timeout": int,
    }

    DUPLICATE_POLICIES = (DUPLICATE_STRICT, DUPLICATE_IGNORE)

    def __init__(self, config_file: Optional[Path] = None):
        """
        初始化配置管理器。

        参数:
            config_file: 配置文件路径，默认为应用程序主目录下的 config.json
        """
        self.config_file = Path(config_file) if config_file else get_app_home() / self.CONFIG_FILE_NAME
        self._config: dict[str, Any] = {}

    def _get_builtin_default_config(self) -> dict[str, Any]:
        """获取内置默认配置。"""
        return {
            "settings": {
                "shims_dir": "",
                "duplicate_registration": DUPLICATE_STRICT,
                "disabled_providers": [],
                "version_probe_timeout": 10,
            }
        }

    def get_default_config(self) -> dict[str, Any]:
        """获取默认配置的副本。"""
        return copy.deepcopy(self._get_builtin_default_config())

    def load_config(self) -> dict[str, Any]:
        """
        从文件加载配置。

        文件不存在、无法解析或验证失败时使用默认配置。

        返回:
            配置字典
        """
        if not self.config_file.exists():
            logger.debug(f"配置文件不存在，使用默认配置: {self.config_file}")
            self._config = self.get_default_config()
            return self._config

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if not isinstance(loaded, dict):
                raise ConfigLoadError(f"配置文件内容必须是 JSON 对象: {self.config_file}")
            self._config = loaded
            self._ensure_backward_compatibility()
            self.validate_config(self._config)
            logger.debug(f"已加载配置文件: {self.config_file}")
            return self._config
        except (OSError, json.JSONDecodeError, ConfigLoadError) as e:
            logger.error(f"加载配置文件失败，使用默认配置: {e}")
            self._config = self.get_default_config()
            return self._config
        except ConfigValidationError as e:
            logger.error(f"配置验证失败，使用默认配置: {e}")
            self._config = self.get_default_config()
            return self._config

    def _ensure_backward_compatibility(self) -> None:
        """为旧版本配置补齐新增字段。"""
        default_settings = self._get_builtin_default_config()["settings"]

        if not isinstance(self._config.get("settings"), dict):
            self._config["settings"] = {}

        settings = self._config["settings"]
        for field, value in default_settings.items():
            if field not in settings:
                settings[field] = copy.deepcopy(value)

    def save_config(self, config: dict[str, Any] | None = None) -> None:
        """
        保存配置到文件。

        参数:
            config: 要保存的配置字典，如果为 None 则保存当前配置

        抛出:
            ConfigValidationError: 配置无效
            ConfigSaveError: 写入失败
        """
        if config is not None:
            self._config = config

        self.validate_config(self._config)

        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"保存配置到 {self.config_file}")
            _atomic_save_json(self.config_file, self._config, indent=2)
            logger.debug("配置保存成功")
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"保存配置失败: {e}")
            raise ConfigSaveError(f"无法保存配置到 {self.config_file}: {e}") from e

    def validate_config(self, config: dict[str, Any]) -> bool:
        """
        验证配置的有效性。

        参数:
            config: 要验证的配置字典

        返回:
            验证通过返回 True

        抛出:
            ConfigValidationError: 配置验证失败时抛出
        """
        for field, expected_type in self.REQUIRED_FIELDS.items():
            if field not in config:
                raise ConfigValidationError(f"缺少必需字段: {field}")
            if not isinstance(config[field], expected_type):
                raise ConfigValidationError(
                    f"字段 '{field}' 必须是 {expected_type.__name__} 类型，"
                    f"实际为 {type(config[field]).__name__}"
                )

        settings = config["settings"]
        for field, expected_type in self.SETTINGS_FIELDS.items():
            if field not in settings:
                raise ConfigValidationError(f"settings 中缺少必需字段: {field}")
            value = settings[field]
            if not isinstance(value, expected_type) or isinstance(value, bool):
                raise ConfigValidationError(
                    f"字段 'settings.{field}' 必须是 {expected_type.__name__} 类型，"
                    f"实际为 {type(value).__name__}"
                )

        if settings["duplicate_registration"] not in self.DUPLICATE_POLICIES:
            raise ConfigValidationError(
                f"settings.duplicate_registration 必须是 {', '.join(self.DUPLICATE_POLICIES)} 之一"
            )

        if settings["version_probe_timeout"] <= 0:
            raise ConfigValidationError("settings.version_probe_timeout 必须大于 0")

        if not all(isinstance(name, str) for name in settings["disabled_providers"]):
            raise ConfigValidationError("settings.disabled_providers 只能包含字符串")

        return True

    @property
    def config(self) -> dict[str, Any]:
        """获取配置字典（延迟加载）。"""
        if not self._config:
            self.load_config()
        return self._config

    def get_config(self) -> dict[str, Any]:
        """获取配置字典。"""
        return self.config

    def get_settings(self) -> dict[str, Any]:
        """获取 settings 配置部分。"""
        return self.config.get("settings", {})

    def get_shims_dir(self) -> Optional[str]:
        """获取 shims 目录，未配置时返回 None 表示使用默认目录。"""
        return self.get_settings().get("shims_dir") or None

    def get_duplicate_policy(self) -> str:
        """获取重复注册处理策略（strict 或 ignore）。"""
        return self.get_settings().get("duplicate_registration", DUPLICATE_STRICT)

    def get_disabled_providers(self) -> List[str]:
        """获取被禁用的提供器名称列表。"""
        return list(self.get_settings().get("disabled_providers", []))

    def get_version_probe_timeout(self) -> int:
        """获取版本探测超时时间（秒）。"""
        return self.get_settings().get("version_probe_timeout", 10)

    def set_setting(self, key: str, value: Any) -> None:
        """
        设置并保存单个 settings 配置项。

        参数:
            key: 配置项名称
            value: 配置值

        抛出:
            ConfigValidationError: 未知配置项或值无效，此时配置保持不变
        """
        if key not in self.SETTINGS_FIELDS:
            raise ConfigValidationError(f"未知配置项: {key}")

        candidate = copy.deepcopy(self.config)
        candidate["settings"][key] = value
        self.validate_config(candidate)
        self.save_config(candidate)
        logger.info(f"已设置 settings.{key} = {value!r}")

    def reset_to_default(self) -> dict[str, Any]:
        """重置配置为默认配置并保存。"""
        self.save_config(self.get_default_config())
        return self._config
