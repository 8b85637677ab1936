"""
后台扫描任务管理模块。

在线程池中执行提供器扫描，避免目录遍历和版本探测阻塞界面线程。
"""

from PySide6.QtCore import Q_ARG, Property, QMetaObject, QObject, QRunnable, Qt, QThreadPool, Signal, Slot

from vmmigrate.core.migration_manager import MigrationManager
from vmmigrate.utils.logger import get_logger

logger = get_logger()


class ProviderScanLoader(QRunnable):
    """提供器扫描器（在后台线程执行）。"""

    def __init__(self, callback_obj, runtime: str, migration_manager: MigrationManager):
        """
        初始化扫描器。

        参数:
            callback_obj: 回调对象
            runtime: 运行时名称，空字符串表示全部
            migration_manager: 迁移管理器实例
        """
        super().__init__()
        self.callback_obj = callback_obj
        self.runtime = runtime
        self.migration_manager = migration_manager

    def run(self):
        """在后台线程执行扫描。"""
        logger.info(f"[SCAN] ProviderScanLoader.run 开始执行: {self.runtime!r}")
        results = []
        try:
            self._set_message(f"正在扫描 {self.runtime or '全部运行时'}...")
            results = [r.to_dict() for r in self.migration_manager.scan(self.runtime or None)]
            count = sum(len(r["versions"]) for r in results)
            self._set_message(f"找到 {count} 个安装")
        except Exception as e:
            logger.error(f"[SCAN] 扫描 {self.runtime!r} 失败: {e}", exc_info=True)
            self._set_message(f"扫描失败: {e}")
        finally:
            self.callback_obj.scanCompleted.emit(self.runtime, results)
            logger.debug("[SCAN] 已发送 scanCompleted 信号")

    def _set_message(self, msg: str):
        """设置消息。"""
        QMetaObject.invokeMethod(
            self.callback_obj,
            "_set_message",
            Qt.QueuedConnection,
            Q_ARG(str, msg)
        )


class ScanTaskManager(QObject):
    """
    后台扫描任务管理类。

    scanCompleted(runtime, results) 在扫描结束后发出，results 为扫描结果字典列表。
    scanning 在所有已提交的扫描都结束后才变为 False。
    """

    messageChanged = Signal()
    scanningChanged = Signal()
    scanCompleted = Signal(str, list)

    def __init__(self, migration_manager: MigrationManager, parent=None, max_threads: int = 2):
        """
        初始化扫描任务管理器。

        参数:
            migration_manager: 迁移管理器实例
            parent: 父对象
            max_threads: 线程池最大线程数
        """
        super().__init__(parent)
        self._migration_manager = migration_manager
        self._message: str = ""
        self._scanning: bool = False
        self._pending: int = 0
        self._thread_pool = QThreadPool()
        self._thread_pool.setMaxThreadCount(max_threads)
        self.scanCompleted.connect(self._on_scan_completed)
        logger.debug(f"[SCAN] 线程池最大线程数设置为 {max_threads}")

    @Property(str, notify=messageChanged)
    def message(self) -> str:
        """获取消息内容。"""
        return self._message

    @Property(bool, notify=scanningChanged)
    def scanning(self) -> bool:
        """获取是否正在扫描。"""
        return self._scanning

    @Slot(str)
    def _set_message(self, msg: str):
        """设置消息内容。"""
        self._message = msg
        self.messageChanged.emit()
        logger.info(f"[SCAN] {msg}")

    def _set_scanning(self, value: bool):
        if self._scanning != value:
            self._scanning = value
            self.scanningChanged.emit()

    @Slot(str, list)
    def _on_scan_completed(self, runtime: str, results: list):
        self._pending = max(self._pending - 1, 0)
        self._set_scanning(self._pending > 0)

    @Slot(str)
    def scan_async(self, runtime: str):
        """
        异步扫描指定运行时。

        参数:
            runtime: 运行时名称，空字符串表示全部
        """
        logger.info(f"[SCAN] 启动异步扫描任务: {runtime!r}")
        self._pending += 1
        self._set_scanning(True)
        self._thread_pool.start(ProviderScanLoader(self, runtime, self._migration_manager))

    def wait_for_done(self, msecs: int = -1) -> bool:
        """等待所有扫描任务结束。"""
        return self._thread_pool.waitForDone(msecs)
