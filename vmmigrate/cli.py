"""
vmmigrate 命令行接口模块。
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Optional

from vmmigrate import __version__
from vmmigrate.core.config_manager import (
    DUPLICATE_STRICT,
    ConfigManager,
    ConfigSaveError,
    ConfigValidationError,
)
from vmmigrate.core.migration_manager import MigrationManager, UninstallError
from vmmigrate.core.registry import MigrationRegistry, ProviderNotFoundError
from vmmigrate.providers import register_builtin_providers
from vmmigrate.utils.input_validator import InputValidationError, InputValidator
from vmmigrate.utils.logger import get_logger, set_log_level

logger = get_logger()

VALIDATED_MARK = "✓"


def create_parser() -> argparse.ArgumentParser:
    """
    创建并配置命令行参数解析器。

    返回:
        配置好的 ArgumentParser 实例
    """
    parser = argparse.ArgumentParser(
        prog="vmmigrate",
        description="vmmigrate - 检测并清理其他版本管理器安装的运行时",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  vmmigrate providers              列出所有迁移提供器
  vmmigrate detect node            检测已安装的 Node.js 版本
  vmmigrate detect -f json         以 JSON 格式输出全部检测结果
  vmmigrate cleanup nvm 18.20.0    显示卸载 nvm 中 18.20.0 的方法
  vmmigrate config --set duplicate_registration=ignore
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="启用详细输出",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="配置文件路径",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="命令",
        description="可用的 CLI 命令",
    )

    providers_parser = subparsers.add_parser(
        "providers",
        help="列出已注册的迁移提供器",
    )
    providers_parser.add_argument(
        "runtime",
        nargs="?",
        default=None,
        help="运行时名称 (node, python, ruby)",
    )
    providers_parser.add_argument(
        "--format",
        "-f",
        choices=["json", "simple"],
        default="simple",
        help="输出格式",
    )

    detect_parser = subparsers.add_parser(
        "detect",
        help="检测其他版本管理器安装的版本",
    )
    detect_parser.add_argument(
        "runtime",
        nargs="?",
        default=None,
        help="运行时名称 (node, python, ruby)，省略则检测全部",
    )
    detect_parser.add_argument(
        "--format",
        "-f",
        choices=["json", "simple"],
        default="simple",
        help="输出格式",
    )

    cleanup_parser = subparsers.add_parser(
        "cleanup",
        help="卸载某个提供器中的指定版本",
    )
    cleanup_parser.add_argument(
        "provider",
        help="提供器名称 (nvm, pyenv, rbenv ...)",
    )
    cleanup_parser.add_argument(
        "version",
        help="要卸载的版本",
    )
    cleanup_parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="不询问直接执行卸载命令",
    )

    config_parser = subparsers.add_parser(
        "config",
        help="显示或修改配置",
    )
    config_parser.add_argument(
        "--set",
        "-s",
        type=str,
        help="设置配置值（格式：key=value）",
    )
    config_parser.add_argument(
        "--get",
        "-g",
        type=str,
        help="获取配置值（如 settings.shims_dir）",
    )
    config_parser.add_argument(
        "--reset",
        action="store_true",
        help="重置为默认配置",
    )

    return parser


def run_cli(args: argparse.Namespace) -> int:
    """
    运行命令行接口。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码（0 表示成功）
    """
    if args.verbose:
        set_log_level(logging.DEBUG)

    if args.command is None:
        print("未指定命令。使用 --help 查看帮助信息。")
        return 1

    command_handlers = {
        "providers": handle_providers,
        "detect": handle_detect,
        "cleanup": handle_cleanup,
        "config": handle_config,
    }

    handler = command_handlers.get(args.command)
    if handler:
        return handler(args)
    print(f"未知命令: {args.command}")
    return 1


def _get_config_manager(args: argparse.Namespace) -> ConfigManager:
    config_file = Path(args.config) if getattr(args, "config", None) else None
    return ConfigManager(config_file)


def _get_managers(args: argparse.Namespace):
    """
    构造配置管理器、注册表和迁移管理器。

    每次调用使用独立的注册表，内置提供器在这里显式注册。

    返回:
        包含 ConfigManager、MigrationRegistry、MigrationManager 的元组
    """
    config_manager = _get_config_manager(args)
    registry = MigrationRegistry()
    register_builtin_providers(
        registry,
        shims_dir=config_manager.get_shims_dir(),
        strict=config_manager.get_duplicate_policy() == DUPLICATE_STRICT,
        timeout=config_manager.get_version_probe_timeout(),
    )
    migration_manager = MigrationManager(registry, config_manager)
    return config_manager, registry, migration_manager


def _normalize_runtime(runtime: Optional[str], migration_manager: MigrationManager) -> Optional[str]:
    """校验运行时名称，未知时打印提示并返回 None。"""
    runtime = InputValidator.sanitize_name(runtime or "")
    try:
        InputValidator.validate_runtime_name(runtime)
    except InputValidationError as e:
        print(f"运行时名称无效: {e}")
        return None

    available = migration_manager.runtimes()
    if runtime not in available:
        print(f"未知运行时: {runtime}")
        print(f"可用运行时: {', '.join(available)}")
        return None
    return runtime


def handle_providers(args: argparse.Namespace) -> int:
    """
    处理 providers 命令：列出已注册的迁移提供器。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码
    """
    _, _, migration_manager = _get_managers(args)

    runtime = None
    if args.runtime:
        runtime = _normalize_runtime(args.runtime, migration_manager)
        if runtime is None:
            return 1

    providers = migration_manager.providers_for(runtime)

    if args.format == "json":
        data = [
            {
                "name": p.name(),
                "display_name": p.display_name(),
                "runtime": p.runtime(),
                "can_auto_uninstall": p.can_auto_uninstall(),
            }
            for p in providers
        ]
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return 0

    print("迁移提供器:")
    for p in providers:
        auto = "自动卸载" if p.can_auto_uninstall() else "手动卸载"
        print(f"  {p.name():<14} {p.runtime():<8} {p.display_name()} [{auto}]")
    return 0


def handle_detect(args: argparse.Namespace) -> int:
    """
    处理 detect 命令：检测其他版本管理器安装的版本。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码
    """
    _, _, migration_manager = _get_managers(args)

    runtime = None
    if args.runtime:
        runtime = _normalize_runtime(args.runtime, migration_manager)
        if runtime is None:
            return 1

    results = migration_manager.scan(runtime)

    if args.format == "json":
        print(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))
        return 0

    for result in results:
        if result.error:
            print(f"警告: {result.display_name} 检测失败: {result.error}")

    versions = migration_manager.collect_versions(results)
    if not versions:
        print(f"未找到 {runtime or '任何运行时'} 的其他安装")
        return 0

    print(f"找到 {len(versions)} 个安装:")
    for index, dv in enumerate(versions, start=1):
        mark = f" {VALIDATED_MARK}" if dv.validated else ""
        print(f"  [{index}] {dv}{mark}")

    if args.verbose:
        present = [r.display_name for r in results if r.present]
        print(f"\n已安装的版本管理器: {', '.join(present) or '无'}")
    return 0


def _confirm(prompt: str) -> bool:
    try:
        answer = input(prompt)
    except EOFError:
        return False
    return answer.strip().lower() == "y"


def handle_cleanup(args: argparse.Namespace) -> int:
    """
    处理 cleanup 命令：卸载某个提供器中的指定版本。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码
    """
    _, _, migration_manager = _get_managers(args)

    provider_name = InputValidator.sanitize_name(args.provider)
    try:
        plan = migration_manager.plan_cleanup(provider_name, args.version)
    except ProviderNotFoundError as e:
        print(str(e))
        return 1
    except InputValidationError as e:
        print(f"版本号无效: {e}")
        return 1

    if not plan.automatable:
        print(f"{plan.provider} 需要手动卸载:")
        print(plan.instructions)
        return 0

    print(f"卸载命令: {plan.command}")
    if not args.yes and not _confirm(f"从 {plan.provider} 移除 v{plan.version}? [y/N]: "):
        print("已跳过。可以稍后手动执行:")
        print(f"  {plan.command}")
        return 0

    try:
        migration_manager.execute_cleanup(plan)
    except UninstallError as e:
        print(f"卸载失败: {e}")
        print("可以手动处理:")
        print(plan.instructions)
        return 1

    print(f"已从 {plan.provider} 移除 v{plan.version}")
    return 0


def handle_config(args: argparse.Namespace) -> int:
    """
    处理 config 命令：显示或修改配置。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码
    """
    config_manager = _get_config_manager(args)

    if args.reset:
        try:
            config_manager.reset_to_default()
        except ConfigSaveError as e:
            print(f"保存配置失败: {e}")
            return 1
        print("配置已重置为默认值")
        return 0

    if args.set:
        key, _, value = args.set.partition("=")
        key = key.strip()
        if key.startswith("settings."):
            key = key[len("settings."):]
        if not key or not value:
            print("格式无效。请使用: key=value")
            return 1

        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = value

        try:
            config_manager.set_setting(key, parsed)
        except ConfigValidationError as e:
            print(f"配置无效: {e}")
            return 1
        except ConfigSaveError as e:
            print(f"保存配置失败: {e}")
            return 1
        print(f"已设置 {key} = {parsed}")
        return 0

    if args.get:
        key = args.get.strip()
        if not key.startswith("settings."):
            key = f"settings.{key}"
        value = InputValidator.safe_get_config_value(config_manager.get_config(), key)
        if value is None:
            print(f"未知配置项: {args.get}")
            return 1
        print(json.dumps(value, ensure_ascii=False))
        return 0

    print(json.dumps(config_manager.get_config(), indent=2, ensure_ascii=False))
    return 0
