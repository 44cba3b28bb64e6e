"""
Default word lists for the lexical safety filter.

Order matters: the blocklist is scanned front to back and the first hit is
reported, so more specific terms sit ahead of broader ones within a group.
"""

from typing import Tuple

# Phrases that legitimately contain a blocked keyword. Any of these anywhere
# in a string suppresses blocking for that string (see SafetyFilter).
DEFAULT_ALLOWED_TERMS: Tuple[str, ...] = (
    "harry potter",
    "potter",
    "potterhead",
    "assassin",
    "assassination",
    "classic",
    "classical",
    "bass",
    "bassist",
    "brass",
    "grass",
    "glass",
    "class",
    "mass",
    "pass",
    "password",
    "compass",
    "fantastic",
    "bombastic",
    "cocomelon",
    "bluey",
    "paw patrol",
)

DEFAULT_BLOCKED_KEYWORDS: Tuple[str, ...] = (
    # Explicit sexual terms
    "sex", "sexy", "porn", "xxx", "nude", "naked", "erotic", "nsfw",
    "dildo", "vibrator", "orgasm", "masturbat", "horny", "boner",
    "stripper", "strip", "prostitut", "hooker", "pimp",
    # Sexual body parts and variations
    "boob", "breast", "tit", "nipple", "areola",
    "penis", "dick", "cock", "phallus", "shaft", "balls", "testicle", "scrotum",
    "vagina", "pussy", "cunt", "vulva", "labia", "clitoris",
    "anus", "butthole", "rectum",
    "butt", "ass", "booty", "rear", "bottom", "bum",
    "genitalia", "genital", "privates",
    # Profanity
    "fuck", "shit", "bitch", "damn", "hell", "crap", "piss",
    "whore", "slut", "bastard", "fag",
    # Drugs and alcohol
    "cocaine", "heroin", "meth", "crack", "weed", "marijuana", "drugs",
    "molly", "ecstasy", "lsd", "acid", "shrooms", "cannabis", "pot",
    "drunk", "beer", "vodka", "whiskey", "alcohol",
    # Violence
    "kill", "murder", "death", "blood", "gore", "violent", "suicide",
    "shoot", "gun", "weapon", "knife", "stab",
    # Terms commonly searched with inappropriate intent
    "lesbian", "gay", "queer", "bisexual",
    # Other
    "demon", "satanic", "devil", "666", "witch", "occult",
)  # fmt: skip
