"""Category rule table for the heuristic content analyzer.

One table drives text and media classification alike.  Each rule carries:

- ``keywords``: matched by plain substring containment on lower-cased text,
- ``patterns``: word-boundary regular expressions; a hit assigns the
  rule's category and raises confidence to ``pattern_confidence``,
- ``media_terms``: substrings looked for in media file names / URLs.

Rules are listed most severe first; the first rule whose patterns match
decides the category.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from cmod.analyzer.models import Category


@dataclass(frozen=True)
class CategoryRule:
    """Keywords, patterns and media terms for one policy category."""

    category: Category
    keywords: tuple[str, ...] = ()
    patterns: tuple[re.Pattern[str], ...] = ()
    media_terms: tuple[str, ...] = ()
    pattern_confidence: float = 0.8
    label: str = ""


def _compile(*sources: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(s, re.IGNORECASE) for s in sources)


SEXUAL_RULE = CategoryRule(
    category=Category.SEXUAL,
    label="Sexual content detected",
    pattern_confidence=0.9,
    keywords=(
        "sex", "sexual", "nude", "naked", "porn", "pornography", "xxx", "x-rated",
        "fuck", "fucking", "fucked", "fuckin", "fucks", "fucker", "fuckers",
        "shit", "shitting", "shitted", "shits", "shitty", "shitter",
        "bitch", "bitches", "bitching", "bitchy",
        "whore", "slut", "sluts", "slutty", "slutting",
        "dick", "penis", "cock", "pussy", "vagina", "boobs", "tits", "titties",
        "ass", "asshole", "butt", "butthole", "arse", "arsehole",
        "cum", "cumming", "cums", "sperm", "jizz",
        "masturbat", "masturbating", "masturbation",
        "orgasm", "orgasmic", "climax",
        "horny", "horniness", "aroused", "arousal",
        "erotic", "erotica", "sexy", "sexiness",
        "seduce", "seduction", "seductive",
        "intimate", "intimacy", "foreplay",
        "fetish", "fetishes", "kinky", "kink",
        "bdsm", "bondage", "domination", "submission",
        "rough", "hardcore", "anal", "oral",
        "blowjob", "handjob", "fingering",
        "threesome", "orgy", "gangbang",
        "milf", "cougar", "teen", "young",
        "stepbrother", "stepsister", "incest",
        "rape", "forced", "non-consensual",
    ),
    patterns=_compile(
        r"\b(?:sex|sexual|nude|naked|porn|xxx|adult|explicit|nsfw)\b",
        r"\b(?:fuck|shit|bitch|whore|slut|dick|penis|cock|pussy|vagina|boobs|tits)\b",
        r"\b(?:cum|masturbat|orgasm|horny|aroused|erotic|sexy|intimate|fetish|bdsm)\b",
        r"\b(?:rough|hardcore|anal|oral|blowjob|handjob|fingering)\b",
        r"\b(?:threesome|orgy|gangbang|milf|cougar|teen|young)\b",
        r"\b(?:stepbrother|stepsister|incest|rape|forced|non-consensual)\b",
    ),
    media_terms=(
        "nude", "naked", "porn", "sex", "adult", "explicit", "nsfw", "xxx",
        "fuck", "shit", "bitch", "whore", "slut", "dick", "penis", "cock",
        "pussy", "vagina", "boobs", "tits", "ass", "butt", "cum", "masturbat",
        "horny", "erotic", "sexy", "intimate", "fetish", "bdsm", "kinky",
        "rough", "hardcore", "anal", "oral", "blowjob", "handjob",
        "threesome", "orgy", "gangbang", "milf", "cougar", "teen", "young",
        "stepbrother", "stepsister", "incest", "rape", "forced",
    ),
)

VIOLENCE_RULE = CategoryRule(
    category=Category.VIOLENCE,
    label="Violent content detected",
    keywords=(
        "kill", "killing", "murder", "murdering", "die", "dying", "death", "dead",
        "suicide", "suicidal", "self harm", "cutting", "cut myself", "hurt myself",
        "bomb", "bombing", "terrorist", "terrorism", "explosive", "explode",
        "gun", "shoot", "shooting", "weapon", "knife", "stab", "stabbing",
        "fight", "fighting", "beat", "beating", "punch", "punching",
        "hit", "hitting", "slap", "slapping", "kick", "kicking",
        "violence", "violent", "brutal", "brutality",
        "threat", "threatening", "threaten", "menace", "menacing",
        "attack", "attacking", "assault", "assaulting",
        "destroy", "destroying", "destruction", "damage", "damaging",
    ),
    patterns=_compile(
        r"\b(?:kill|murder|die|death|suicide|self harm|cut myself|hurt myself)\b",
        r"\b(?:bomb|shoot|gun|weapon|knife|stab|fight|beat|punch|hit|slap|kick)\b",
        r"\b(?:violence|violent|brutal|threat|attack|assault|destroy|damage)\b",
    ),
    media_terms=("violence", "violent", "brutal", "threat", "attack", "assault"),
)

HATE_RULE = CategoryRule(
    category=Category.HATE,
    label="Hate speech detected",
    keywords=(
        "hate", "hatred", "hateful", "racist", "racism", "racial",
        "nazi", "hitler", "fascist", "fascism",
        "gay", "lesbian", "transgender", "faggot", "dyke", "tranny",
        "retard", "retarded", "stupid", "idiot", "moron", "dumb",
        "ugly", "fat", "skinny", "disgusting", "gross",
        "discrimination", "discriminatory", "prejudice", "prejudiced",
        "sexist", "sexism", "misogynist", "misogyny",
        "homophobic", "homophobia", "transphobic", "transphobia",
    ),
    patterns=_compile(
        r"\b(?:hate|racist|nazi|hitler|fascist|gay|lesbian|transgender|faggot|dyke|tranny)\b",
        r"\b(?:retard|stupid|idiot|moron|dumb|ugly|fat|skinny|disgusting|gross)\b",
        r"\b(?:discrimination|prejudice|sexist|misogynist|homophobic|transphobic)\b",
    ),
    media_terms=(
        "hate", "racist", "nazi", "hitler", "fascist", "gay", "lesbian",
        "transgender", "faggot", "dyke", "tranny", "retard", "stupid",
    ),
)

SCAM_RULE = CategoryRule(
    category=Category.SCAM,
    label="Scam or spam content detected",
    keywords=(
        "scam", "scamming", "scammer", "fraud", "fraudulent",
        "steal", "stealing", "theft", "rob", "robbing", "robbery",
        "hack", "hacking", "hacker", "phishing", "phish",
        "illegal", "unlawful", "criminal", "crime",
        "cheat", "cheating", "cheater", "lie", "lying", "liar",
        "fake", "faking", "deception", "deceptive",
        "spam", "spamming", "spammer", "advertisement", "advertising",
        "promote", "promoting", "promotion", "marketing",
        "sell", "selling", "sale", "buy", "buying", "purchase",
        "money", "cash", "payment", "pay", "paying",
        "free", "discount", "offer", "deal", "bargain",
        "click", "clicking", "link", "website", "url",
        "download", "downloading", "file", "files",
        "virus", "malware", "trojan", "worm",
        "password", "passwords", "login", "account", "accounts",
        "personal", "private", "confidential", "secret", "secrets",
    ),
    patterns=_compile(
        r"\b(?:scam|fraud|steal|hack|illegal|criminal|cheat|fake|spam)\b",
        r"\b(?:sell|buy|money|cash|payment|free|discount|offer|deal)\b",
        r"\b(?:click|link|website|url|download|virus|malware|password|login)\b",
    ),
    media_terms=("scam", "fraud", "illegal", "criminal", "cheat", "fake", "spam"),
)

DRUGS_RULE = CategoryRule(
    category=Category.DRUGS,
    label="Drug or alcohol content detected",
    keywords=(
        "drug", "drugs", "cocaine", "coke", "heroin", "marijuana", "weed", "cannabis",
        "alcohol", "drunk", "drinking", "beer", "wine", "liquor", "vodka", "whiskey",
        "smoke", "smoking", "cigarette", "cigarettes", "tobacco",
        "high", "stoned", "baked", "wasted", "intoxicated",
        "addiction", "addict", "addicted", "addictive",
        "overdose", "overdosing", "poison", "poisoning",
    ),
)

DEFAULT_RULES: tuple[CategoryRule, ...] = (
    SEXUAL_RULE,
    VIOLENCE_RULE,
    HATE_RULE,
    SCAM_RULE,
    DRUGS_RULE,
)
