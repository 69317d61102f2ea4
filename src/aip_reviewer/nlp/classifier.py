"""Noun/verb classification and inflection for API path words.

Lookups go through the fast-path tables in `lexicon` first. Anything else
is tagged by a small nltk tagger (a verb lexicon backed off to morphology
rules), which needs no downloaded corpora. Inflection of regular words is
delegated to `inflection`.
"""

import logging
import threading
from typing import Callable, NamedTuple

import inflection
from cachetools import LRUCache
from nltk.tag import RegexpTagger, UnigramTagger

from aip_reviewer.nlp.lexicon import (
    API_UNCOUNTABLES,
    COMMON_VERBS,
    IRREGULAR_PLURALS,
    IRREGULAR_SINGULARS,
)

logger = logging.getLogger(__name__)

API_PATH = "api-path"
GENERAL = "general"

VERB_TAGS = frozenset({"VB", "VBD", "VBZ"})
NOUN_TAGS = frozenset({"NN", "NNS", "VBG"})

# After a determiner the noun reading of a verb form wins
_NOUN_SWITCH = {"VB": "NN", "VBZ": "NNS"}

_MORPHOLOGY = [
    (r"^-?\d+(\.\d+)?$", "CD"),
    (r"^(the|a|an)$", "DT"),
    (r"^\w+ings$", "NNS"),
    (r"^\w{2,}ing$", "VBG"),
    (r"^\w{2,}[^e]ed$", "VBD"),
    (r"^\w+(ss|us|is)$", "NN"),
    (r"^\w+s$", "NNS"),
    (r".*", "NN"),
]

_MISSING = object()


class WordAnalysis(NamedTuple):
    is_verb: bool
    is_noun: bool
    is_uncountable: bool
    tag: str


def _build_tagger() -> UnigramTagger:
    lexicon = {verb: "VB" for verb in COMMON_VERBS}
    for verb in sorted(COMMON_VERBS):
        lexicon.setdefault(inflection.pluralize(verb), "VBZ")
    return UnigramTagger(model=lexicon, backoff=RegexpTagger(_MORPHOLOGY))


def _match_case(original: str, result: str) -> str:
    if original[:1].isupper() and result:
        return result[0].upper() + result[1:]
    return result


class Classifier:
    """Part-of-speech heuristics tuned for REST path segments.

    Every answer is memoized in a bounded LRU cache owned by the instance,
    keyed by the lower-cased word (plus the context for the predicates).
    Cache access is serialized so one instance can be shared across threads.
    """

    def __init__(self, cache_size: int = 2000, uncountable_cache_size: int = 500):
        self._tagger = _build_tagger()
        self._lock = threading.RLock()
        self._caches = {
            "pluralize": LRUCache(maxsize=cache_size),
            "singularize": LRUCache(maxsize=cache_size),
            "is_verb": LRUCache(maxsize=cache_size),
            "is_noun": LRUCache(maxsize=cache_size),
            "is_uncountable": LRUCache(maxsize=uncountable_cache_size),
        }

    def _memo(self, name: str, key, compute: Callable):
        cache = self._caches[name]
        with self._lock:
            value = cache.get(key, _MISSING)
        if value is _MISSING:
            value = compute()
            with self._lock:
                cache[key] = value
        return value

    def clear_caches(self) -> None:
        with self._lock:
            for cache in self._caches.values():
                cache.clear()

    def cache_info(self) -> dict[str, int]:
        with self._lock:
            return {name: len(cache) for name, cache in self._caches.items()}

    # -- tagging ---------------------------------------------------------

    def tag(self, word: str, context: str = API_PATH) -> str:
        """Part-of-speech tag of a lone word.

        In the api-path context the word is tagged as "the <word>", which
        settles noun/verb ambiguity the way a real sentence would.
        """
        lower = word.lower()
        if context == API_PATH:
            tagged = self._tagger.tag(["the", lower])
            tag = tagged[-1][1]
            return _NOUN_SWITCH.get(tag, tag)
        return self._tagger.tag([lower])[0][1]

    # -- predicates ------------------------------------------------------

    def is_verb(self, word: str, context: str = API_PATH) -> bool:
        lower = word.lower()
        return self._memo("is_verb", (lower, context), lambda: self._is_verb(lower, context))

    def _is_verb(self, lower: str, context: str) -> bool:
        if lower in COMMON_VERBS:
            return True
        if lower in API_UNCOUNTABLES:
            return False

        if self.tag(lower, GENERAL) not in VERB_TAGS:
            return False
        if context == API_PATH:
            # "logs", "orders", "updates": plural nouns inside a path
            return self.tag(lower, API_PATH) not in NOUN_TAGS
        return True

    def is_noun(self, word: str, context: str = API_PATH) -> bool:
        lower = word.lower()
        return self._memo("is_noun", (lower, context), lambda: self._is_noun(lower, context))

    def _is_noun(self, lower: str, context: str) -> bool:
        if lower in API_UNCOUNTABLES:
            return True
        if lower in COMMON_VERBS:
            return False
        return self.tag(lower, context) in NOUN_TAGS

    def is_uncountable(self, word: str) -> bool:
        lower = word.lower()
        return self._memo(
            "is_uncountable",
            lower,
            lambda: lower in API_UNCOUNTABLES or lower in inflection.UNCOUNTABLES,
        )

    def analyze(self, word: str, context: str = API_PATH) -> WordAnalysis:
        return WordAnalysis(
            is_verb=self.is_verb(word, context),
            is_noun=self.is_noun(word, context),
            is_uncountable=self.is_uncountable(word),
            tag=self.tag(word, context),
        )

    # -- inflection ------------------------------------------------------

    def pluralize(self, word: str) -> str:
        if not word:
            return word
        lower = word.lower()
        return _match_case(word, self._memo("pluralize", lower, lambda: self._pluralize(lower)))

    def _pluralize(self, lower: str) -> str:
        if lower in API_UNCOUNTABLES:
            return lower
        if lower in IRREGULAR_PLURALS:
            return IRREGULAR_PLURALS[lower]
        if lower in IRREGULAR_SINGULARS:
            return lower
        if lower.endswith("s") and not lower.endswith(("ss", "us")):
            return lower
        return inflection.pluralize(lower)

    def singularize(self, word: str) -> str:
        if not word:
            return word
        lower = word.lower()
        return _match_case(word, self._memo("singularize", lower, lambda: self._singularize(lower)))

    def _singularize(self, lower: str) -> str:
        if lower in IRREGULAR_SINGULARS:
            return IRREGULAR_SINGULARS[lower]
        if lower in IRREGULAR_PLURALS:
            return lower
        if lower in API_UNCOUNTABLES:
            return lower
        return inflection.singularize(lower)


default_classifier = Classifier()


def pluralize(word: str) -> str:
    return default_classifier.pluralize(word)


def singularize(word: str) -> str:
    return default_classifier.singularize(word)


def is_verb(word: str, context: str = API_PATH) -> bool:
    return default_classifier.is_verb(word, context)


def is_noun(word: str, context: str = API_PATH) -> bool:
    return default_classifier.is_noun(word, context)


def is_uncountable(word: str) -> bool:
    return default_classifier.is_uncountable(word)


def analyze_word(word: str, context: str = API_PATH) -> WordAnalysis:
    return default_classifier.analyze(word, context)


def clear_caches() -> None:
    """Reset the shared classifier's caches."""
    default_classifier.clear_caches()
    logger.debug("Cleared NLP caches")
