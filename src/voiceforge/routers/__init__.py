from . import control, history, queue, settings, text_processing, tts_socket

__all__ = ["control", "history", "queue", "settings", "text_processing", "tts_socket"]
