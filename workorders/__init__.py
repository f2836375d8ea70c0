# Work Orders - auto-repair work-order engine
__version__ = "1.0.0"
