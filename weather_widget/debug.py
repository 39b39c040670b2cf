# ABOUTME: Debug logging helper gated by the DEBUG env var
# ABOUTME: Prints to stdout so container log collectors pick it up

from weather_widget.config import Config


def debug_log(message: str, category: str = "DEBUG") -> None:
    """Print a tagged debug line when DEBUG=true."""
    if Config.DEBUG:
        print(f"[{category}] {message}", flush=True)
