"""Rule evaluation for libraries and launch arguments.

Libraries and arguments are gated by two different rule walkers:

* a library is excluded when an ``allow`` rule names an OS or an
  architecture different from the current one;
* an argument is excluded when an ``allow`` rule carries one of the
  blocking conditions: a ``is_demo_user`` feature equal to the current demo
  flag, a ``has_custom_resolution`` feature set to true, an OS named
  ``windows`` or an architecture equal to the current one.

Both walkers include entries that have no rules at all.
"""

import platform
from dataclasses import dataclass
from typing import Iterable, Optional

from .models import Rule

_OS_NAMES = {
    "windows": "windows",
    "darwin": "osx",
    "linux": "linux",
}

_MACHINE_ARCHS = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
}


def normalize_arch(arch: str) -> str:
    """Map an architecture name to the rule notation (``amd64`` -> ``x64``)."""
    return "x" + arch.lstrip("amd")


@dataclass(frozen=True)
class RuntimeContext:
    os_name: str
    arch: str
    is_demo_user: bool = False

    @classmethod
    def current(cls, is_demo_user: bool = False) -> "RuntimeContext":
        system = platform.system().lower()
        machine = platform.machine().lower()
        return cls(
            os_name=_OS_NAMES.get(system, system),
            arch=_MACHINE_ARCHS.get(machine, machine),
            is_demo_user=is_demo_user,
        )

    @property
    def rule_arch(self) -> str:
        return normalize_arch(self.arch)

    @property
    def is_windows(self) -> bool:
        return self.os_name == "windows"


def library_allowed(rules: Optional[Iterable[Rule]], context: RuntimeContext) -> bool:
    """Return whether a library with ``rules`` ships on ``context``'s platform."""
    if not rules:
        return True
    excluded = False
    for rule in rules:
        if not rule.is_allow or rule.os is None:
            continue
        if rule.os.name is not None and rule.os.name != context.os_name:
            excluded = True
        if rule.os.arch is not None and rule.os.arch != context.rule_arch:
            excluded = True
    return not excluded


def argument_allowed(rules: Optional[Iterable[Rule]], context: RuntimeContext) -> bool:
    """Return whether an argument entry with ``rules`` is kept."""
    if not rules:
        return True
    excluded = False
    for rule in rules:
        if not rule.is_allow:
            continue
        if rule.features:
            if rule.features.get("is_demo_user", not context.is_demo_user) == context.is_demo_user:
                excluded = True
            if rule.features.get("has_custom_resolution", False):
                excluded = True
        if rule.os is not None:
            if rule.os.name == "windows":
                excluded = True
            if rule.os.arch is not None and rule.os.arch == context.rule_arch:
                excluded = True
    return not excluded
