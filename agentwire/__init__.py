"""agentwire: expose conversational agents over the A2A protocol."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("agentwire")
except PackageNotFoundError:
    __version__ = "0.1.0"  # fallback for development
