"""Alias tables for degrees and roles.

User-supplied degree and role identifiers come in many shapes: slugs,
historical French labels, English ordinals from an older frontend, with or
without accents. The tables here are the single place where those shapes
are mapped to canonical identifiers. They are immutable and built once at
import time; the database lookup that turns a degree slug into an id lives in
``schoolplan.services.alias_resolver``.
"""

import enum
import unicodedata
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional


def normalize_alias(value: str) -> str:
    """Fold a free-text identifier to its comparison form.

    Strips diacritics, case-folds, removes control characters and collapses
    whitespace, so that "2ème  Année Collège" and "2eme annee college" match.
    """
    decomposed = unicodedata.normalize("NFKD", value)
    kept = []
    for char in decomposed:
        category = unicodedata.category(char)
        if category == "Mn":
            continue
        if category == "Cc":
            kept.append(" ")
            continue
        if category.startswith("C"):
            continue
        kept.append(char)
    return " ".join("".join(kept).casefold().split())


@dataclass(frozen=True)
class CanonicalDegree:
    """One canonical degree and every string accepted for it."""

    slug: str
    label: str
    position: int
    aliases: frozenset[str] = field(default_factory=frozenset)

    def accepted(self) -> set[str]:
        names = {self.slug, self.label, *self.aliases}
        return {normalize_alias(name) for name in names}


class DegreeAliasTable:
    """Immutable alias → canonical slug lookup.

    Raises:
        ValueError: At construction, if the table does not hold exactly
            ``expected_count`` degrees or if one alias points at two of them.
    """

    def __init__(self, degrees: Iterable[CanonicalDegree], expected_count: int = 5):
        self._degrees = tuple(sorted(degrees, key=lambda d: d.position))
        if len(self._degrees) != expected_count:
            raise ValueError(
                f"Expected {expected_count} canonical degrees, got {len(self._degrees)}"
            )

        index: dict[str, str] = {}
        for degree in self._degrees:
            for alias in degree.accepted():
                owner = index.setdefault(alias, degree.slug)
                if owner != degree.slug:
                    raise ValueError(
                        f"Alias {alias!r} maps to both {owner!r} and {degree.slug!r}"
                    )
        self._index: Mapping[str, str] = MappingProxyType(index)

    @property
    def degrees(self) -> tuple[CanonicalDegree, ...]:
        return self._degrees

    @property
    def slugs(self) -> tuple[str, ...]:
        return tuple(degree.slug for degree in self._degrees)

    def match(self, value: Optional[str]) -> Optional[str]:
        """Return the canonical slug for ``value``, or None when nothing matches."""
        if value is None:
            return None
        key = normalize_alias(value)
        if not key:
            return None
        return self._index.get(key)

    def get(self, slug: str) -> Optional[CanonicalDegree]:
        for degree in self._degrees:
            if degree.slug == slug:
                return degree
        return None


DEFAULT_DEGREE_ALIASES = DegreeAliasTable(
    [
        CanonicalDegree(
            slug="college-3eme",
            label="3ème année collège",
            position=1,
            aliases=frozenset(
                {
                    "3eme",
                    "3ème",
                    "college 3eme",
                    "first",
                    "première année collège",
                    "1ère année collège",
                    "1er année collège",
                    "2ème année collège",
                    "2eme annee college",
                    "2éme année college",
                }
            ),
        ),
        CanonicalDegree(
            slug="tronc-commun",
            label="Tronc Commun",
            position=2,
            aliases=frozenset(
                {
                    "tc",
                    "second",
                    "deuxième année collège",
                    "troisième année collège",
                }
            ),
        ),
        CanonicalDegree(
            slug="bac1-se",
            label="1er année Bac (SE)",
            position=3,
            aliases=frozenset(
                {
                    "third",
                    "1ère année bac (se)",
                    "1bac se",
                    "bac1 se",
                }
            ),
        ),
        CanonicalDegree(
            slug="bac1-sm",
            label="1er année Bac (SM)",
            position=4,
            aliases=frozenset(
                {
                    "fourth",
                    "1ère année bac (sm)",
                    "1ère année bac",
                    "1er année bac",
                    "première année bac",
                    "1bac sm",
                    "bac1 sm",
                }
            ),
        ),
        CanonicalDegree(
            slug="bac2",
            label="2ème année Bac",
            position=5,
            aliases=frozenset(
                {
                    "final",
                    "2eme annee bac",
                    "bac 2",
                    "2bac",
                }
            ),
        ),
    ]
)


class Role(str, enum.Enum):
    """Canonical user roles."""

    STUDENT = "student"
    TEACHER = "teacher"
    PARENT = "parent"
    ADMIN = "admin"


_ROLE_SYNONYMS: Mapping[str, Role] = MappingProxyType(
    {
        normalize_alias(name): role
        for role, names in (
            (Role.STUDENT, ("student", "élève", "etudiant", "étudiant", "eleve")),
            (Role.TEACHER, ("teacher", "enseignant", "prof", "professeur")),
            (Role.PARENT, ("parent",)),
            (Role.ADMIN, ("admin", "administrator", "administrateur")),
        )
        for name in names
    }
)


def resolve_role(value: Optional[str]) -> Optional[str]:
    """Map a role synonym to its canonical value.

    Unknown input comes back lower-cased rather than failing; callers that
    need one of the four canonical roles check membership in ``Role``.
    """
    if value is None:
        return None
    if isinstance(value, Role):
        return value.value
    role = _ROLE_SYNONYMS.get(normalize_alias(value))
    if role is not None:
        return role.value
    return value.strip().lower()


def is_canonical_role(value: Optional[str]) -> bool:
    return value in {role.value for role in Role}
