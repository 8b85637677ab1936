"""
迁移提供器抽象接口定义。

定义所有版本管理器检测器必须实现的 IMigrationProvider 接口，
以及检测结果记录 DetectedVersion。
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Dict, List


class MigrationError(Exception):
    """迁移模块错误基类。"""
    pass


class DetectionError(MigrationError):
    """版本检测过程中出现非"未安装"类的意外错误。"""
    pass


@dataclass(frozen=True)
class DetectedVersion:
    """
    由提供器发现的一个运行时安装。

    validated 为 True 表示版本号来自执行可执行文件的输出，
    为 False 表示版本号仅由目录名推断。
    """

    version: str
    path: str
    source: str
    validated: bool = False

    def __str__(self) -> str:
        return f"v{self.version} ({self.source}) {self.path}"

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典，用于 JSON 输出。"""
        return asdict(self)


class IMigrationProvider(ABC):
    """
    迁移提供器抽象接口。

    每个实现负责一种第三方版本管理器（nvm、pyenv、rbenv 等）的检测与清理说明。
    实现不得持有可变状态，同一实例的所有方法多次调用结果一致。
    """

    @abstractmethod
    def name(self) -> str:
        """返回唯一的小写标识（如 "nvm"），用作注册表键。"""
        pass

    @abstractmethod
    def display_name(self) -> str:
        """返回用于界面显示的名称。"""
        pass

    @abstractmethod
    def runtime(self) -> str:
        """返回所管理的运行时（如 "node"、"python"、"ruby"）。"""
        pass

    @abstractmethod
    def is_present(self) -> bool:
        """快速检查版本管理器是否已安装，不抛出异常。"""
        pass

    @abstractmethod
    def detect_versions(self) -> List[DetectedVersion]:
        """
        扫描已知位置，返回该版本管理器安装的所有版本。

        未找到时返回空列表而不是 None。

        抛出:
            DetectionError: 出现权限不足等意外 I/O 错误时抛出
        """
        pass

    @abstractmethod
    def can_auto_uninstall(self) -> bool:
        """是否支持自动卸载。"""
        pass

    @abstractmethod
    def uninstall_command(self, version: str) -> str:
        """
        返回卸载指定版本的命令。

        参数:
            version: 版本号

        返回:
            可直接执行的命令字符串，不支持自动卸载时返回空字符串
        """
        pass

    @abstractmethod
    def manual_instructions(self) -> str:
        """返回手动卸载说明，始终非空。"""
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name()!r} runtime={self.runtime()!r}>"
