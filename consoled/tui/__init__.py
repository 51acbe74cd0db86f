"""
TUI (Terminal User Interface) for the console dashboard.

Provides the live status view mirrored to every system console.
"""

# Lazy imports so that light users of the package (e.g. the footer composer)
# do not pull in the console and data source stack.


def __getattr__(name):
    """Lazy import handler for module attributes."""
    if name == 'Dashboard':
        from .dashboard import Dashboard
        return Dashboard
    elif name == 'get_dashboard':
        from .dashboard import get_dashboard
        return get_dashboard
    elif name == 'release_dashboard':
        from .dashboard import release_dashboard
        return release_dashboard
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ['Dashboard', 'get_dashboard', 'release_dashboard']
