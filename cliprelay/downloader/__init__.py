"""
Fetching and size-constraining videos
"""
from .downloader import VideoDownloader
from .size_constrainer import SizeConstrainer, move_file

__all__ = ['VideoDownloader', 'SizeConstrainer', 'move_file']
