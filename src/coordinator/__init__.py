"""
Display coordination service package.

This package contains the hub process that:
- tracks which displays are currently connected
- holds the current display arrangement (horizontal, vertical, grid)
- routes face-at-edge events to the spatially adjacent display
"""
