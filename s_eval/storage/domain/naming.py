"""Run naming — identifiers, slugs and generated two-word names."""

import random
import re
import uuid

_ADJECTIVES: tuple[str, ...] = (
    "amber", "ancient", "bold", "brave", "bright", "calm", "clever", "cosmic",
    "crimson", "curious", "daring", "eager", "fancy", "fierce", "gentle",
    "golden", "happy", "hidden", "humble", "jolly", "keen", "lively", "lucky",
    "mellow", "mighty", "misty", "noble", "patient", "proud", "quiet", "rapid",
    "rustic", "silent", "silver", "sleepy", "snowy", "steady", "sunny",
    "swift", "tidy", "vivid", "wild", "wise", "witty", "young", "zesty",
)

_NOUNS: tuple[str, ...] = (
    "badger", "beacon", "breeze", "canyon", "cedar", "comet", "coral", "crane",
    "delta", "ember", "falcon", "fern", "fjord", "forest", "galaxy", "glacier",
    "harbor", "heron", "island", "lagoon", "lantern", "lynx", "maple", "meadow",
    "meteor", "orchid", "otter", "panda", "pebble", "pine", "planet", "quartz",
    "raven", "reef", "river", "robin", "sparrow", "summit", "thunder", "tiger",
    "tundra", "valley", "walrus", "willow", "wolf", "zephyr",
)

_UNSAFE = re.compile(r"[^A-Za-z0-9.-]+")

SESSION_NAME_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9.-]*$"


def new_run_id() -> str:
    """Return an 8-character hex run identifier."""
    return uuid.uuid4().hex[:8]


def generate_run_name(rng: random.Random | None = None) -> str:
    """Return a human-memorable ``adjective-noun`` name."""
    chooser = rng or random
    return f"{chooser.choice(_ADJECTIVES)}-{chooser.choice(_NOUNS)}"


def slugify(name: str) -> str:
    """Make *name* safe for use in a path segment and the ``{name}_{id}`` stem.

    Underscores are replaced too, since ``_`` separates name from run id.
    """
    slug = _UNSAFE.sub("-", name.strip()).strip("-.")
    return slug or "unnamed"
