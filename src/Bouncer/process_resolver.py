"""
Process table helpers.

Used when a window does not publish _NET_WM_PID: the process table is
scanned for an executable whose recorded name equals the search name.
"""
import logging

import psutil

logger = logging.getLogger(__name__)


def find_pid_by_name(name: str) -> int:
    """
    Find the first process whose name equals ``name``, ignoring case.

    Entries that vanish or deny access during the scan are skipped.

    :param name: Executable name to look for
    :return: Process id, or 0 when nothing matches
    """
    if not name:
        return 0

    wanted = name.lower()

    for proc in psutil.process_iter(["name"]):
        try:
            pid = proc.pid
            if pid == 0:
                continue
            proc_name = proc.info.get("name")
            if proc_name is None:
                proc_name = proc.name()
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue

        if proc_name and proc_name.lower() == wanted:
            logger.debug(f"Process table: '{name}' -> {pid}")
            return pid

    return 0


def pid_exists(pid: int) -> bool:
    """Non-invasive existence probe, no signal is delivered."""
    return psutil.pid_exists(pid)
