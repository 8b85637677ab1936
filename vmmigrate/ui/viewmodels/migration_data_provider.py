"""
迁移数据提供模块。

负责运行时列表和检测结果数据的管理，供 QML 界面绑定。
"""

from typing import Any, Dict, List

from PySide6.QtCore import QObject, Property, Signal, Slot

from vmmigrate.core.interfaces import DetectedVersion
from vmmigrate.core.migration_manager import MigrationManager
from vmmigrate.utils.logger import get_logger

logger = get_logger()


def version_to_item(dv: DetectedVersion) -> Dict[str, Any]:
    """把检测结果转换为 QML 使用的字典。"""
    return {
        "version": dv.version,
        "path": dv.path,
        "source": dv.source,
        "validated": dv.validated,
        "label": str(dv),
    }


class MigrationDataProvider(QObject):
    """
    迁移数据提供类。

    currentRuntime 为空字符串时表示全部运行时。
    """

    runtimesChanged = Signal()
    currentRuntimeChanged = Signal()
    scanResultsChanged = Signal()
    detectedVersionsChanged = Signal()

    def __init__(self, migration_manager: MigrationManager, parent=None):
        """
        初始化迁移数据提供器。

        参数:
            migration_manager: 迁移管理器实例
            parent: 父对象
        """
        super().__init__(parent)
        logger.info("[MIGRATION_DATA] 初始化 MigrationDataProvider")
        self._migration_manager = migration_manager
        self._runtimes: List[str] = []
        self._current_runtime: str = ""
        self._scan_results: List[Dict[str, Any]] = []
        self._detected_versions: List[Dict[str, Any]] = []
        self._load_runtimes()

    def _load_runtimes(self):
        """加载运行时列表。"""
        self._runtimes = self._migration_manager.runtimes()
        logger.debug(f"[MIGRATION_DATA] 运行时列表: {self._runtimes}")
        self.runtimesChanged.emit()

    @Property(list, notify=runtimesChanged)
    def runtimes(self) -> List[str]:
        """获取运行时列表。"""
        return self._runtimes

    @Property(str, notify=currentRuntimeChanged)
    def currentRuntime(self) -> str:
        """获取当前选中的运行时。"""
        return self._current_runtime

    @currentRuntime.setter
    def currentRuntime(self, value: str):
        """设置当前选中的运行时。"""
        if self._current_runtime != value:
            logger.info(f"[MIGRATION_DATA] currentRuntime 变更: 旧值={self._current_runtime!r}, 新值={value!r}")
            self._current_runtime = value
            self.currentRuntimeChanged.emit()

    @Property(list, notify=scanResultsChanged)
    def scanResults(self) -> List[Dict[str, Any]]:
        """获取各提供器的扫描结果。"""
        return self._scan_results

    @Property(list, notify=detectedVersionsChanged)
    def detectedVersions(self) -> List[Dict[str, Any]]:
        """获取汇总后的检测结果。"""
        return self._detected_versions

    def load_scan_results(self):
        """同步扫描当前运行时并更新数据。"""
        runtime = self._current_runtime or None
        logger.info(f"[MIGRATION_DATA] load_scan_results(): 运行时={runtime!r}")
        results = [r.to_dict() for r in self._migration_manager.scan(runtime)]
        self.update_scan_results(self._current_runtime, results)

    @Slot(str, list)
    def update_scan_results(self, runtime: str, results: List[Dict[str, Any]]):
        """
        更新扫描结果，忽略已不是当前运行时的旧结果。

        参数:
            runtime: 扫描对应的运行时，空字符串表示全部
            results: ProviderScanResult.to_dict() 列表
        """
        if runtime != self._current_runtime:
            logger.debug(f"[MIGRATION_DATA] 运行时 {runtime!r} 与当前运行时 {self._current_runtime!r} 不匹配，忽略")
            return

        self._scan_results = results
        self.scanResultsChanged.emit()

        versions = []
        for result in results:
            for item in result.get("versions", []):
                versions.append(version_to_item(DetectedVersion(**item)))
        self._detected_versions = versions
        self.detectedVersionsChanged.emit()
        logger.info(f"[MIGRATION_DATA] 检测结果已更新，版本数量={len(versions)}")

    @Slot()
    def refresh_runtimes(self):
        """刷新运行时列表。"""
        self._load_runtimes()
