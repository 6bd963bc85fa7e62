"""
Tool Discovery

Scans Python packages (and optionally a directory of plain modules) for tool
modules and registers what they export. A tool module exposes either a
module-level ``TOOL`` or a ``TOOLS`` sequence; modules with neither are
skipped.

Discovery isolates failures per candidate: a module that fails to import or a
tool that fails registration is logged and skipped, and discovery continues
with the rest.
"""

import importlib
import importlib.util
import logging
import pkgutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Iterable, Optional

from assistant_gateway.core.exceptions import RegistrationError
from assistant_gateway.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryReport:
    """
    Outcome of a discovery pass.

    Attributes:
        registered: Names of tools registered, in order.
        failures: Mapping of candidate (module or tool) to failure message.
    """

    registered: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)


def _exported_tools(module: ModuleType) -> list[Any]:
    """Tools a module exports through TOOL or TOOLS."""
    if hasattr(module, "TOOLS"):
        return list(getattr(module, "TOOLS"))
    if hasattr(module, "TOOL"):
        return [getattr(module, "TOOL")]
    return []


def register_module_tools(
    registry: ToolRegistry, module: ModuleType, report: DiscoveryReport
) -> None:
    """Register every tool a module exports, isolating each failure."""
    for tool in _exported_tools(module):
        try:
            registered = registry.register(tool)
        except RegistrationError as e:
            candidate = f"{module.__name__}:{e.tool_name or '<unnamed>'}"
            logger.warning(f"Failed to load tool from {candidate}: {e.message}")
            report.failures[candidate] = e.message
            continue
        report.registered.append(registered.name)


def discover_package(
    registry: ToolRegistry,
    package_name: str,
    report: Optional[DiscoveryReport] = None,
) -> DiscoveryReport:
    """
    Register the tools of every module in a package.

    Args:
        registry: Registry to populate.
        package_name: Dotted name of the package to scan.
        report: Report to extend (a new one is created if omitted).

    Returns:
        The discovery report.
    """
    report = report or DiscoveryReport()

    try:
        package = importlib.import_module(package_name)
    except Exception as e:
        logger.warning(f"Failed to import tool package {package_name}: {e}")
        report.failures[package_name] = str(e)
        return report

    search_path = getattr(package, "__path__", None)
    if search_path is None:
        register_module_tools(registry, package, report)
        return report

    for module_info in sorted(pkgutil.iter_modules(search_path), key=lambda m: m.name):
        if module_info.name.startswith("_"):
            continue
        module_name = f"{package_name}.{module_info.name}"
        try:
            module = importlib.import_module(module_name)
        except Exception as e:
            logger.warning(f"Failed to load tool from {module_name}: {e}")
            report.failures[module_name] = str(e)
            continue
        register_module_tools(registry, module, report)

    return report


def discover_directory(
    registry: ToolRegistry,
    directory: Path,
    report: Optional[DiscoveryReport] = None,
) -> DiscoveryReport:
    """
    Register the tools of every ``*.py`` file in a directory.

    The files are loaded as standalone modules; they are not required to be
    part of an installed package.
    """
    report = report or DiscoveryReport()
    if not directory.is_dir():
        logger.warning(f"Failed to read tool directory {directory}: not a directory")
        report.failures[str(directory)] = "not a directory"
        return report

    for path in sorted(directory.glob("*.py")):
        if path.name.startswith("_"):
            continue
        module_name = f"assistant_gateway_user_tools.{path.stem}"
        try:
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise ImportError(f"cannot load {path.name}")
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            logger.warning(f"Failed to load tool from {path.name}: {e}")
            report.failures[str(path)] = str(e)
            continue
        register_module_tools(registry, module, report)

    return report


def discover_tools(
    registry: ToolRegistry,
    packages: Iterable[str],
    directories: Iterable[Path] = (),
) -> DiscoveryReport:
    """
    Run a full discovery pass over packages and directories.

    Returns:
        The combined discovery report.
    """
    report = DiscoveryReport()
    for package_name in packages:
        logger.info(f"Loading tools from package: {package_name}")
        discover_package(registry, package_name, report)
    for directory in directories:
        logger.info(f"Loading tools from directory: {directory}")
        discover_directory(registry, directory, report)

    logger.info(f"Total tools registered: {len(registry)}")
    return report
