"""
UI ViewModels 模块。

提供 MVVM 架构中的 ViewModel 类。
"""

from .migration_data_provider import MigrationDataProvider
from .scan_task_manager import ScanTaskManager

__all__ = [
    "MigrationDataProvider",
    "ScanTaskManager",
]
