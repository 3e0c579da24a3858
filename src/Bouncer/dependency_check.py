"""
Dependency checking and reporting for Bouncer.
Checks for Python packages and the system facilities Bouncer relies on.
"""
import importlib
import importlib.util
import logging
import os
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Dependency:
    name: str
    category: str  # "Required", "System"
    description: str
    display_name: Optional[str] = None
    installed: bool = False
    version: Optional[str] = None
    feature: Optional[str] = None


class DependencyChecker:
    """Checks for Python packages and system facilities."""

    def __init__(self):
        self.python_packages = [
            Dependency("Xlib", "Required", "X11 protocol client", display_name="python-xlib"),
            Dependency("psutil", "Required", "Process table access"),
            Dependency("yaml", "Required", "YAML configuration parsing", display_name="PyYAML"),
        ]

        self.system_facilities = [
            Dependency("/proc", "System", "Process table", feature="PID lookup fallback"),
            Dependency("DISPLAY", "System", "X display name", feature="Connecting to the X server"),
        ]

    def _check_python_package(self, dep: Dependency) -> bool:
        """Check if a Python package is installed."""
        try:
            spec = importlib.util.find_spec(dep.name)
        except (ImportError, ValueError):
            return False

        if spec is None:
            return False

        try:
            module = importlib.import_module(dep.name)
        except ImportError as exc:
            logger.debug(f"Importing {dep.name} failed: {exc}")
            return False

        version = getattr(module, '__version__', None)
        if isinstance(version, tuple):
            version = ".".join(str(part) for part in version)
        dep.version = version or 'unknown'
        return True

    def _check_system_facility(self, dep: Dependency) -> bool:
        if dep.name.startswith("/"):
            return os.path.isdir(dep.name)
        return bool(os.environ.get(dep.name))

    def run_check(self) -> List[Dependency]:
        """Run all checks and return the results."""
        results = []

        for dep in self.python_packages:
            dep.installed = self._check_python_package(dep)
            results.append(dep)

        for dep in self.system_facilities:
            dep.installed = self._check_system_facility(dep)
            results.append(dep)

        return results

    def print_report(self):
        """Print a formatted report to the console."""
        results = self.run_check()

        print("\n" + "=" * 60)
        print(" Bouncer Dependency Check ".center(60, "="))
        print("=" * 60 + "\n")

        print("--- Python Packages ---")
        for dep in results:
            if dep.category == "Required":
                status = "INSTALLED" if dep.installed else "MISSING"
                version_str = f" (v{dep.version})" if dep.version and dep.version != 'unknown' else ""
                name_to_show = dep.display_name or dep.name
                print(f"{status.ljust(12)} {name_to_show.ljust(15)} {dep.description}{version_str}")

        print("\n--- System ---")
        for dep in results:
            if dep.category == "System":
                status = "FOUND" if dep.installed else "MISSING"
                print(f"{status.ljust(12)} {dep.name.ljust(15)} {dep.description}")
                if not dep.installed and dep.feature:
                    print(f"             Impact: {dep.feature} will not work")

        if self.has_critical_failures(results):
            print("\nCRITICAL: Missing required Python packages!")
            print("Run: pip install bouncer")

        print("\n" + "=" * 60 + "\n")

    def has_critical_failures(self, results: Optional[List[Dependency]] = None) -> bool:
        """Check if any required dependencies are missing."""
        if results is None:
            results = self.run_check()
        return any(not dep.installed for dep in results if dep.category == "Required")
