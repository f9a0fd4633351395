"""
The VIEW layer: Qt widgets (main window, panels, map and globe views).
"""
