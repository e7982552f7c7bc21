from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sunforge")
except PackageNotFoundError:
    __version__ = "unknown"  # running from a source checkout
