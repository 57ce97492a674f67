# initwindow/core/exclusion.py

"""
Decides which running processes are noise (OS internals, shell parts,
background services, dev tooling, ourselves) and should never be offered
to the user as an "app".
"""

from __future__ import annotations

from typing import Iterable

from .config import ExclusionSettings

# Names are stored normalized: lower-case, no ".exe".
BUILTIN_EXCLUDED_NAMES = frozenset({
    # OS core
    "system", "system idle process", "registry", "memory compression", "secure system",
    "smss", "csrss", "wininit", "winlogon", "services", "lsass", "lsaiso", "svchost",
    "fontdrvhost", "dwm", "sihost", "taskhostw", "ctfmon", "conhost", "dllhost",
    "spoolsv", "wudfhost", "dashost", "wmiprvse", "msdtc", "vdsldr", "vds", "audiodg",
    "trustedinstaller", "tiworker", "msiexec", "smartscreen", "lockapp", "userinit",
    # shell components
    "explorer", "runtimebroker", "shellexperiencehost", "startmenuexperiencehost",
    "textinputhost", "applicationframehost", "backgroundtaskhost", "systemsettings",
    "shellhost", "widgets", "widgetservice", "phoneexperiencehost", "gamebarpresencewriter",
    # search / indexing
    "searchui", "searchapp", "searchhost", "searchindexer", "searchprotocolhost",
    "searchfilterhost",
    # security / update services
    "securityhealthservice", "securityhealthsystray", "sgrmbroker", "msmpeng", "nissrv",
    "mpdefendercoreservice", "wuauclt", "usocoreworker", "musnotification",
    "musnotifyicon", "compattelrunner", "mousocoreworker",
    # dev tooling / shells
    "cmd", "powershell", "pwsh", "windowsterminal", "openconsole", "openssh", "ssh-agent",
    "git", "node", "electron", "python", "pythonw", "py", "wsl", "wslhost", "wslservice",
    # this application
    "initwindow", "init-window",
    # OEM bundled utilities
    "nvcontainer", "nvdisplay.container", "nvidia share", "nvidia web helper",
    "radeonsoftware", "amdrsserv", "atieclxx", "igfxem", "igfxhk", "igfxtray",
    "rtkauduservice64", "realtekaudioservice", "lenovovantageservice",
    "dellsupportassistremedationservice", "hpprintscandoctorservice", "asusoptimization",
    "armourycrate.service", "synaptics", "syntpenh", "etdctrl",
})

BUILTIN_EXCLUDED_PATH_PREFIXES = (
    "c:\\windows\\system32\\",
    "c:\\windows\\syswow64\\",
    "c:\\windows\\systemapps\\",
    "c:\\windows\\winsxs\\",
    "c:\\windows\\servicing\\",
    "c:\\windows\\immersivecontrolpanel\\",
)

# The shell lives directly in C:\Windows, which as a whole is not excluded.
BUILTIN_EXCLUDED_PATHS = frozenset({"c:\\windows\\explorer.exe"})


def normalize_name(name: str) -> str:
    n = (name or "").strip().lower()
    if n.endswith(".exe"):
        n = n[: -len(".exe")]
    return n


def normalize_path(path: str) -> str:
    return (path or "").strip().replace("/", "\\").lower()


def _starts_with_any(path: str, prefixes: Iterable[str]) -> bool:
    for prefix in prefixes:
        p = normalize_path(prefix)
        if p and path.startswith(p):
            return True
    return False


def should_exclude(name: str, path: str, settings: ExclusionSettings) -> bool:
    """
    True if the process should be hidden from the user.

    Rules, first match wins:
      1. built-in excluded name
      2. built-in system directory / shell executable
      3. user excluded name
      4. user excluded path prefix
    """
    n = normalize_name(name)
    p = normalize_path(path)

    if n in BUILTIN_EXCLUDED_NAMES:
        return True

    if p in BUILTIN_EXCLUDED_PATHS or _starts_with_any(p, BUILTIN_EXCLUDED_PATH_PREFIXES):
        return True

    if any(n == normalize_name(user_name) for user_name in settings.excluded_process_names):
        return True

    if _starts_with_any(p, settings.excluded_paths):
        return True

    return False


class ExclusionPolicy:
    """Thin object wrapper so the rules can be injected and swapped in tests."""

    def should_exclude(self, name: str, path: str, settings: ExclusionSettings) -> bool:
        return should_exclude(name, path, settings)
