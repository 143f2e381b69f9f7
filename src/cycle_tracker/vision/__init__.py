"""Computer vision operations: hand tracking, metric smoothing, and overlay.

Import submodules directly; ``hands`` pulls in MediaPipe.
"""
