"""
Utility modules organized by domain.

Submodules:
- text: ANSI-aware measuring and hard wrapping
- cleanup: Shutdown context with run-once cleanup functions
- timers: Cancellable one-shot and repeating timers
- logging: Logging configuration
- ui: Terminal canvas, key dispatch and the fullscreen writer
"""
