"""
The CONTROLLER layer: projection math, scene and marker building, gesture
handling, the selection pulse and background workers.
"""
