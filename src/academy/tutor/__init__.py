"""Tutor context streaming: wire events, the server-side streamer and the reconstructing client."""
