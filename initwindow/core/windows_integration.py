# initwindow/core/windows_integration.py

"""
Windows-specific integration utilities.
Icon extraction from executables via the Win32 shell APIs.

Only imported on Windows (pywin32 is a Windows-only dependency).
"""

import logging
from typing import Optional

import cv2
import numpy as np
import win32api
import win32con
import win32gui
import win32ui


class WindowsIntegration:
    """Windows-specific system integration utilities."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("initwindow.WindowsIntegration")

    def extract_icon_png(self, exe_path: str, size: Optional[int] = None) -> Optional[bytes]:
        """
        Extract the first embedded icon of an executable as PNG bytes.

        Args:
            exe_path: Full path to the executable
            size: Edge length in pixels (defaults to the system large-icon size)

        Returns:
            PNG-encoded bytes, or None if the file embeds no icon
        """
        large, small = win32gui.ExtractIconEx(exe_path, 0)
        handles = list(large) + list(small)
        if not handles:
            self.logger.debug(f"No icon embedded in {exe_path}")
            return None

        hicon = large[0] if large else small[0]
        if size is None:
            size = win32api.GetSystemMetrics(win32con.SM_CXICON)

        screen_dc = win32gui.GetDC(0)
        dc = win32ui.CreateDCFromHandle(screen_dc)
        mem_dc = dc.CreateCompatibleDC()
        bitmap = win32ui.CreateBitmap()
        try:
            bitmap.CreateCompatibleBitmap(dc, size, size)
            mem_dc.SelectObject(bitmap)
            win32gui.DrawIconEx(
                mem_dc.GetSafeHdc(), 0, 0, hicon, size, size, 0, None, win32con.DI_NORMAL
            )

            info = bitmap.GetInfo()
            bits = bitmap.GetBitmapBits(True)
            pixels = np.frombuffer(bits, dtype=np.uint8).reshape(
                (info["bmHeight"], info["bmWidth"], 4)
            ).copy()

            # Icons without an alpha mask come back fully transparent
            if not pixels[:, :, 3].any():
                pixels[:, :, 3] = 255

            ok, encoded = cv2.imencode(".png", pixels)
            if not ok:
                self.logger.warning(f"PNG encoding failed for icon of {exe_path}")
                return None
            return encoded.tobytes()
        finally:
            mem_dc.DeleteDC()
            dc.DeleteDC()
            win32gui.ReleaseDC(0, screen_dc)
            win32gui.DeleteObject(bitmap.GetHandle())
            for h in handles:
                win32gui.DestroyIcon(h)
