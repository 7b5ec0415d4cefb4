# worldgen/errors.py


class GenerationError(RuntimeError):
    """A generation phase ran without the state an earlier phase should have built."""


class PresetError(ValueError):
    """A preset descriptor could not be parsed."""
