"""Chat-bot plugin logic: sign-in scores, sleep tracking, wordle, tarot, diaries and picture stores."""

__version__ = "0.1.0"