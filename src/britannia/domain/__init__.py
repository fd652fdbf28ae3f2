"""Pure county-economy engine.

The package exposes:

* Frozen dataclasses describing the game state (see :mod:`models`).
* Enumerations, including the closed track union (see :mod:`enums`).
* Rule configuration objects (see :mod:`rules_config`).
* Pure rule functions for resources, tracks, county actions, queues and
  yields, the turn resolver, and the command dispatcher.

Nothing in here performs I/O; the static map data is supplied by
:mod:`britannia.data`.
"""

from . import (
    actions,
    build_queue,
    county_actions,
    dispatcher,
    economy,
    eligibility,
    enums,
    models,
    orders,
    resources,
    rules_config,
    setup,
    tracks,
    turn,
)

__all__ = [
    "actions",
    "build_queue",
    "county_actions",
    "dispatcher",
    "economy",
    "eligibility",
    "enums",
    "models",
    "orders",
    "resources",
    "rules_config",
    "setup",
    "tracks",
    "turn",
]
