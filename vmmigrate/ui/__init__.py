"""
vmmigrate 图形界面模块。

提供基于 PySide6 的 ViewModel，供嵌入 QML 界面使用。
"""
