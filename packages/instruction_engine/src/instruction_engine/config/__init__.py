"""Engine configuration."""

from instruction_engine.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
