"""Index a music folder and serve it as browsable folders and M3U playlists."""

__version__ = "0.4.0"
