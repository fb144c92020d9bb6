"""Preset sources and resolution."""

from vuecreate.preset.loaders import (
    RemotePresetError,
    RemoteReference,
    load_local_preset,
    load_remote_preset,
)
from vuecreate.preset.resolver import PresetResolver

__all__ = [
    "PresetResolver",
    "RemotePresetError",
    "RemoteReference",
    "load_local_preset",
    "load_remote_preset",
]
