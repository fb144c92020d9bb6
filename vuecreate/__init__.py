"""vuecreate -- plugin-composable scaffolding for Vue projects.

Resolves a preset (saved, local, remote, inline, default or interactive),
expands it into an ordered plugin list and drives generation, package
installation and git initialisation of a new project directory.

Quick usage::

    import asyncio
    from vuecreate import Config, CreateOptions, create

    config = Config.from_env()
    result = asyncio.run(create("my-app", CreateOptions(default=True), config))
"""

from vuecreate.config import Config, CreateOptions
from vuecreate.create import create
from vuecreate.creator import CreationResult, Creator
from vuecreate.events import EventBus, LifecycleEvent
from vuecreate.options import Preset

__all__ = [
    "Config",
    "CreateOptions",
    "CreationResult",
    "Creator",
    "EventBus",
    "LifecycleEvent",
    "Preset",
    "create",
]
