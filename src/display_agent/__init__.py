"""
Display agent package.

This package contains the per-display client that:
- pulls frames from the display's camera
- runs face detection every detection cycle
- reports a face near the left/right edge to the coordination service
- receives approach notifications for faces walking in from a neighbour
"""
