"""
Keyword Normalizer

Maps surface word forms to one canonical token using a synonym table followed
by a stemming table, so that "debugging", "troubleshoot" and "debugger" all
compare equal to "debug".
"""

from typing import Dict, Iterable, List, Set, Tuple
import logging

logger = logging.getLogger(__name__)


# canonical -> surface forms
SYNONYM_GROUPS: List[Tuple[str, Tuple[str, ...]]] = [
    # Programming
    ("code", ("coding", "programming", "program", "script", "scripting")),
    ("develop", ("development", "developer", "dev")),
    ("debug", ("debugging", "debugger", "troubleshoot", "troubleshooting")),
    ("test", ("testing", "tester", "qa", "quality")),
    ("build", ("building", "compile", "compiling", "compilation")),
    ("deploy", ("deployment", "deploying", "release", "releasing")),
    ("write", ("writing", "create", "creating", "generate", "generating")),
    ("fix", ("fixing", "repair", "repairing", "resolve", "resolving")),
    ("optimize", ("optimizing", "optimization", "improve", "improving")),
    ("analyze", ("analyzing", "analysis", "examine", "examining")),
    ("review", ("reviewing", "check", "checking", "inspect", "inspecting")),
    ("refactor", ("refactoring", "restructure", "restructuring")),
    # .NET
    ("csharp", ("c#", "cs")),
    ("dotnet", (".net", "net")),
    ("aspnet", ("asp.net", "asp")),
    # Concepts
    ("api", ("endpoint", "webservice")),
    ("database", ("db", "datastore")),
    ("authentication", ("auth", "login", "signin")),
    ("authorization", ("authz", "permission")),
    ("documentation", ("doc", "docs", "readme")),
    ("configuration", ("config", "setting", "settings")),
    ("function", ("method", "procedure", "routine")),
    ("class", ("type", "object")),
    ("interface", ("contract", "abstraction")),
    ("security", ("secure", "encryption", "encrypt")),
    ("mobile", ("app", "application")),
    # "analysis" is claimed by both groups; the later one wins
    ("data", ("analysis", "analytics")),
]

# inflected form -> base form
STEMS: Dict[str, str] = {
    # -ing
    "coding": "code",
    "programming": "program",
    "developing": "develop",
    "testing": "test",
    "debugging": "debug",
    "building": "build",
    "deploying": "deploy",
    "writing": "write",
    "creating": "create",
    "generating": "generate",
    "fixing": "fix",
    "optimizing": "optimize",
    "analyzing": "analyze",
    "reviewing": "review",
    "refactoring": "refactor",
    # -er
    "developer": "develop",
    "tester": "test",
    "debugger": "debug",
    "builder": "build",
    "analyzer": "analyze",
    "reviewer": "review",
    # -ed
    "coded": "code",
    "programmed": "program",
    "developed": "develop",
    "tested": "test",
    "debugged": "debug",
    "built": "build",
    "deployed": "deploy",
    "created": "create",
    "generated": "generate",
    "fixed": "fix",
    "optimized": "optimize",
    "analyzed": "analyze",
    "reviewed": "review",
    "refactored": "refactor",
    # -s
    "codes": "code",
    "programs": "program",
    "develops": "develop",
    "tests": "test",
    "builds": "build",
    "deploys": "deploy",
    "writes": "write",
    "creates": "create",
    "generates": "generate",
    "fixes": "fix",
    "optimizes": "optimize",
    "analyzes": "analyze",
    "reviews": "review",
    "apis": "api",
    "databases": "database",
    "functions": "function",
    "methods": "method",
    "classes": "class",
    # -ment
    "development": "develop",
    "deployment": "deploy",
    "improvement": "improve",
    # -tion
    "optimization": "optimize",
    "configuration": "config",
    "authentication": "auth",
    "authorization": "authz",
    "documentation": "document",
    "implementation": "implement",
    "compilation": "compile",
    "refactoration": "refactor",
}


class KeywordNormalizer:
    """
    Two-stage word normalizer: synonym lookup, then stemming lookup.

    Stem targets are resolved through both tables when the normalizer is
    built, so every output is a fixed point and normalize() is idempotent
    ("programs" -> "code", not "program", since "program" is itself a
    synonym of "code").
    """

    def __init__(self):
        self._synonym_map = self._build_synonym_map()
        self._stemming_map = self._build_stemming_map(self._synonym_map)

    def normalize(self, word: str) -> str:
        """
        Normalize a single word.

        Args:
            word: Word to normalize

        Returns:
            Lower-cased canonical form (unknown words pass through lower-cased)
        """
        normalized = word.lower()

        # Synonyms first: some synonyms are irregular forms the stemmer misses
        normalized = self._synonym_map.get(normalized, normalized)
        normalized = self._stemming_map.get(normalized, normalized)

        return normalized

    def normalize_words(self, words: Iterable[str]) -> Set[str]:
        """Normalize a collection of words into a de-duplicated set"""
        return {self.normalize(word) for word in words}

    @property
    def synonym_count(self) -> int:
        return len(self._synonym_map)

    @property
    def stem_count(self) -> int:
        return len(self._stemming_map)

    def table_words(self) -> Set[str]:
        """All surface forms known to either table"""
        return set(self._synonym_map) | set(self._stemming_map)

    @staticmethod
    def _build_synonym_map() -> Dict[str, str]:
        synonyms: Dict[str, str] = {}
        for canonical, forms in SYNONYM_GROUPS:
            for form in forms:
                synonyms[form.lower()] = canonical
        return synonyms

    @staticmethod
    def _build_stemming_map(synonyms: Dict[str, str]) -> Dict[str, str]:
        stemming: Dict[str, str] = {}
        for form, base in STEMS.items():
            target = synonyms.get(base, base)
            target = STEMS.get(target, target)
            if target != base:
                logger.debug(f"Stem '{form}' resolved through tables: {base} -> {target}")
            stemming[form] = target
        return stemming
