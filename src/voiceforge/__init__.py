"""VoiceForge: viewer text-to-speech queue with moderation and voice direction."""

__version__ = "0.1.0"
