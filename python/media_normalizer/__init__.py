"""
Media Normalizer - Path-driven audio tag repair and library layout.

This package provides tools to:
- Infer artist, album and title tags from directory and file names
- Write the inferred tags to MP3, FLAC, and M4A files
- Rebuild files with broken tag containers through ffmpeg
- Expand zip archives into artist/album folders
- Organize files into album folders from their existing tags
"""

__version__ = "1.0.0"
