"""Core — models, engine, steps, and use cases."""
