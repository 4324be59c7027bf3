"""Read Rainbow Six Siege round replays into structured match data, with statistics and an upload server."""

__version__ = "0.1.0"