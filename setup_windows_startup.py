"""
Windows startup registration script.
Registers InitWindow to run on Windows startup (with --auto-start).
"""

import argparse
import sys

from initwindow.core.autostart import AutoStartError, AutoStartService, launch_command


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Register InitWindow to start with Windows")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--disable", action="store_true", help="remove the startup entry")
    group.add_argument("--status", action="store_true", help="print whether startup is enabled")
    args = parser.parse_args(argv)

    service = AutoStartService()

    if args.status:
        print("enabled" if service.is_enabled() else "disabled")
        return 0

    try:
        if args.disable:
            service.disable()
            print("InitWindow removed from Windows startup.")
        else:
            service.enable()
            print(f"InitWindow registered for Windows startup: {launch_command()}")
    except AutoStartError as e:
        print(f"Registry update failed: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
