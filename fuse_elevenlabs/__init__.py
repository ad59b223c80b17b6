"""
fuse-elevenlabs: ElevenLabs voice AI nodes for Fuse workflows.
"""

__version__ = "0.1.0"
