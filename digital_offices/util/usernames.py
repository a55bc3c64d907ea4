"""Human-readable username generation.

Usernames look like ``calm-teal-otter``: an adjective, a colour and an
animal joined by hyphens, all lower case and URL-safe. They are used
in public expert URLs, so they must not reveal the email address.
Uniqueness is enforced by the database; callers retry on collision.
"""
from __future__ import annotations

import secrets

ADJECTIVES = (
    "able", "bold", "brave", "bright", "calm", "careful", "cheerful", "clever",
    "curious", "eager", "fair", "gentle", "glad", "graceful", "happy", "honest",
    "humble", "jolly", "keen", "kind", "lively", "lucky", "merry", "mighty",
    "modest", "neat", "nimble", "noble", "patient", "peaceful", "polite", "proud",
    "quick", "quiet", "rapid", "ready", "sincere", "smart", "smooth", "steady",
    "sunny", "swift", "tender", "thankful", "tidy", "vivid", "warm", "wise",
    "witty", "zesty",
)

COLORS = (
    "amber", "aqua", "azure", "beige", "black", "blue", "bronze", "brown",
    "coral", "crimson", "cyan", "gold", "gray", "green", "indigo", "ivory",
    "jade", "lavender", "lemon", "lilac", "lime", "magenta", "maroon", "mint",
    "navy", "olive", "orange", "peach", "pink", "plum", "purple", "red",
    "rose", "ruby", "salmon", "sapphire", "scarlet", "silver", "tan", "teal",
    "turquoise", "violet", "white", "yellow",
)

ANIMALS = (
    "alpaca", "badger", "bat", "bear", "beaver", "bison", "camel", "cat",
    "cheetah", "crane", "crow", "deer", "dolphin", "dove", "eagle", "elk",
    "falcon", "ferret", "finch", "fox", "gazelle", "gecko", "heron", "horse",
    "ibis", "jaguar", "koala", "lemur", "leopard", "lynx", "marten", "mole",
    "moose", "newt", "otter", "owl", "panda", "parrot", "pelican", "puffin",
    "rabbit", "raven", "robin", "seal", "sparrow", "swan", "tiger", "turtle",
    "walrus", "whale", "wolf", "wren", "yak", "zebra",
)


def generate_username() -> str:
    """Return a random ``adjective-colour-animal`` username."""
    return "-".join(
        secrets.choice(words) for words in (ADJECTIVES, COLORS, ANIMALS)
    )
