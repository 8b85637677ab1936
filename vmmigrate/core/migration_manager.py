"""
迁移管理器模块。

按运行时汇总各提供器的检测结果，并生成和执行旧版本的清理方案。
"""

import shlex
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from vmmigrate.core import version_utils
from vmmigrate.core.config_manager import ConfigManager
from vmmigrate.core.interfaces import (
    DetectedVersion,
    DetectionError,
    IMigrationProvider,
    MigrationError,
)
from vmmigrate.core.registry import MigrationRegistry
from vmmigrate.utils.input_validator import InputValidator
from vmmigrate.utils.logger import get_logger

logger = get_logger()


class UninstallError(MigrationError):
    """卸载命令执行失败错误异常。"""
    pass


@dataclass
class ProviderScanResult:
    """单个提供器的扫描结果。"""

    provider: str
    display_name: str
    runtime: str
    present: bool
    versions: List[DetectedVersion] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "display_name": self.display_name,
            "runtime": self.runtime,
            "present": self.present,
            "versions": [v.to_dict() for v in self.versions],
            "error": self.error,
        }


@dataclass(frozen=True)
class CleanupPlan:
    """
    清理方案。

    command 非空时可以自动执行，否则需要按 instructions 手动处理。
    """

    provider: str
    version: str
    command: str
    instructions: str

    @property
    def automatable(self) -> bool:
        return bool(self.command)


class MigrationManager:
    """
    迁移管理器类。

    作为注册表的使用方，负责按运行时扫描、汇总检测结果和清理旧安装。
    """

    def __init__(self, registry: MigrationRegistry, config_manager: Optional[ConfigManager] = None):
        """
        初始化迁移管理器。

        参数:
            registry: 迁移提供器注册表
            config_manager: 配置管理器实例，为 None 时不禁用任何提供器
        """
        self.registry = registry
        self.config_manager = config_manager

    def _disabled_providers(self) -> List[str]:
        if self.config_manager is None:
            return []
        return self.config_manager.get_disabled_providers()

    def runtimes(self) -> List[str]:
        """返回已注册提供器涉及的所有运行时，按名称排序。"""
        return sorted({p.runtime() for p in self.registry.get_all()})

    def providers_for(self, runtime: Optional[str] = None) -> List[IMigrationProvider]:
        """
        获取启用的提供器，按名称排序。

        参数:
            runtime: 运行时名称，为 None 时返回全部

        返回:
            提供器列表
        """
        if runtime is None:
            providers = self.registry.get_all()
        else:
            providers = self.registry.get_by_runtime(runtime)

        disabled = set(self._disabled_providers())
        return sorted(
            (p for p in providers if p.name() not in disabled),
            key=lambda p: p.name(),
        )

    def scan_provider(self, provider: IMigrationProvider) -> ProviderScanResult:
        """
        扫描单个提供器。

        未安装时直接返回，不执行较慢的版本检测。检测错误（包括提供器的意外异常）
        记录在结果的 error 中，不向上抛出，其他提供器的扫描不受影响。

        参数:
            provider: 提供器实例

        返回:
            扫描结果
        """
        result = ProviderScanResult(
            provider=provider.name(),
            display_name=provider.display_name(),
            runtime=provider.runtime(),
            present=False,
        )

        try:
            result.present = provider.is_present()
            if not result.present:
                logger.debug(f"{result.provider} 未安装，跳过检测")
                return result
            versions = provider.detect_versions()
        except DetectionError as e:
            logger.warning(f"{result.provider} 版本检测失败: {e}")
            result.error = str(e)
            return result
        except Exception as e:
            logger.error(f"{result.provider} 扫描时出现意外错误: {e}", exc_info=True)
            result.error = f"{type(e).__name__}: {e}"
            return result

        result.versions = version_utils.sort_versions_desc(version_utils.dedupe_by_path(versions))
        logger.info(f"{result.provider} 检测到 {len(result.versions)} 个版本")
        return result

    def scan(self, runtime: Optional[str] = None) -> List[ProviderScanResult]:
        """
        扫描指定运行时（或全部）的所有启用提供器。

        参数:
            runtime: 运行时名称，为 None 时扫描全部

        返回:
            各提供器的扫描结果列表
        """
        providers = self.providers_for(runtime)
        logger.info(f"开始扫描 {runtime or '全部运行时'}，提供器数量: {len(providers)}")
        return [self.scan_provider(p) for p in providers]

    @staticmethod
    def collect_versions(results: List[ProviderScanResult]) -> List[DetectedVersion]:
        """
        汇总已有扫描结果中的版本，按路径去重并按版本降序排列。

        参数:
            results: scan() 返回的扫描结果

        返回:
            检测结果列表
        """
        versions: List[DetectedVersion] = []
        for result in results:
            versions.extend(result.versions)
        return version_utils.sort_versions_desc(version_utils.dedupe_by_path(versions))

    def detected_versions(self, runtime: Optional[str] = None) -> List[DetectedVersion]:
        """
        扫描并返回所有版本，按路径去重并按版本降序排列。

        参数:
            runtime: 运行时名称，为 None 时扫描全部

        返回:
            检测结果列表
        """
        return self.collect_versions(self.scan(runtime))

    def plan_cleanup(self, provider_name: str, version: str) -> CleanupPlan:
        """
        生成指定版本的清理方案。

        参数:
            provider_name: 提供器名称
            version: 要清理的版本号

        返回:
            清理方案

        抛出:
            ProviderNotFoundError: 提供器不存在
            InputValidationError: 版本号包含非法字符
        """
        provider = self.registry.get(provider_name)
        version = InputValidator.sanitize_version_string(version)
        InputValidator.validate_version_string(version)

        command = provider.uninstall_command(version) if provider.can_auto_uninstall() else ""
        return CleanupPlan(
            provider=provider.name(),
            version=version,
            command=command,
            instructions=provider.manual_instructions(),
        )

    def execute_cleanup(self, plan: CleanupPlan) -> None:
        """
        执行清理命令，不经过 shell。

        参数:
            plan: 清理方案

        抛出:
            UninstallError: 方案不支持自动执行，或命令执行失败
        """
        if not plan.automatable:
            raise UninstallError(f"{plan.provider} 不支持自动卸载，请手动处理")

        args = shlex.split(plan.command, posix=sys.platform != "win32")
        logger.info(f"执行卸载命令: {plan.command}")
        try:
            result = subprocess.run(args)
        except OSError as e:
            logger.error(f"无法执行卸载命令 {plan.command}: {e}")
            raise UninstallError(f"无法执行卸载命令 {plan.command}: {e}") from e

        if result.returncode != 0:
            logger.error(f"卸载命令返回非零退出码 {result.returncode}: {plan.command}")
            raise UninstallError(f"卸载命令失败 (退出码 {result.returncode}): {plan.command}")

        logger.info(f"已从 {plan.provider} 移除版本 {plan.version}")
