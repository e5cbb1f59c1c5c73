"""
cliprelay - relay a video link to a chat webhook
"""
__version__ = "0.1.0"
