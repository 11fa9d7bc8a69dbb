"""Unit tests for the degree and role alias tables."""

import pytest

from schoolplan.utils.aliases import (
    DEFAULT_DEGREE_ALIASES,
    CanonicalDegree,
    DegreeAliasTable,
    Role,
    is_canonical_role,
    normalize_alias,
    resolve_role,
)

ALL_ALIASES = [
    (degree.slug, alias)
    for degree in DEFAULT_DEGREE_ALIASES.degrees
    for alias in sorted({degree.slug, degree.label, *degree.aliases})
]


def test_normalize_alias_folds_case_accents_and_whitespace():
    """Test: Accents, case, control characters and spacing are folded away."""
    assert normalize_alias("  2ème   Année\tCollège ") == "2eme annee college"
    assert normalize_alias("ÉLÈVE") == "eleve"
    assert normalize_alias("bac\u200b2") == "bac2"


def test_default_table_holds_five_degrees_in_position_order():
    """Test: The installation table has the five canonical slugs."""
    assert DEFAULT_DEGREE_ALIASES.slugs == (
        "college-3eme",
        "tronc-commun",
        "bac1-se",
        "bac1-sm",
        "bac2",
    )


@pytest.mark.parametrize("slug, alias", ALL_ALIASES)
def test_every_registered_alias_matches_its_degree(slug, alias):
    """Test: Each alias, slug and label resolves to its own degree."""
    assert DEFAULT_DEGREE_ALIASES.match(alias) == slug
    assert DEFAULT_DEGREE_ALIASES.match(alias.upper()) == slug
    assert DEFAULT_DEGREE_ALIASES.match(f"  {alias}  ") == slug


@pytest.mark.parametrize(
    "variant, slug",
    [
        ("3EME", "college-3eme"),
        ("2eme annee college", "college-3eme"),
        ("TRONC COMMUN", "tronc-commun"),
        ("1ere annee bac", "bac1-sm"),
        ("2ÈME ANNÉE BAC", "bac2"),
    ],
)
def test_diacritic_and_case_variants(variant, slug):
    """Test: Variants without accents or in another case still match."""
    assert DEFAULT_DEGREE_ALIASES.match(variant) == slug


@pytest.mark.parametrize("value", ["licence", "bac 3", "", "   ", None, "4eme"])
def test_unknown_values_do_not_match(value):
    """Test: Strings outside every alias set give None."""
    assert DEFAULT_DEGREE_ALIASES.match(value) is None


def test_table_rejects_alias_shared_by_two_degrees():
    """Test: An alias claimed by two degrees fails at construction."""
    degrees = [
        CanonicalDegree(slug=f"d{i}", label=f"Degree {i}", position=i)
        for i in range(1, 5)
    ]
    degrees.append(
        CanonicalDegree(slug="d5", label="Degree 5", position=5, aliases=frozenset({"DEGREE 1"}))
    )

    with pytest.raises(ValueError, match="maps to both"):
        DegreeAliasTable(degrees)


def test_table_rejects_wrong_degree_count():
    """Test: The table must hold the expected number of degrees."""
    with pytest.raises(ValueError, match="Expected 5"):
        DegreeAliasTable([CanonicalDegree(slug="only", label="Only", position=1)])


def test_table_get_by_slug():
    """Test: Canonical records can be looked up by slug."""
    assert DEFAULT_DEGREE_ALIASES.get("bac2").label == "2ème année Bac"
    assert DEFAULT_DEGREE_ALIASES.get("missing") is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("élève", "student"),
        ("Eleve", "student"),
        ("étudiant", "student"),
        ("ENSEIGNANT", "teacher"),
        ("prof", "teacher"),
        ("Professeur", "teacher"),
        ("parent", "parent"),
        ("Administrateur", "admin"),
        ("administrator", "admin"),
        (Role.TEACHER, "teacher"),
    ],
)
def test_resolve_role_synonyms(value, expected):
    """Test: Localized role names map to canonical roles."""
    assert resolve_role(value) == expected
    assert is_canonical_role(resolve_role(value))


def test_resolve_role_passes_unknown_values_through_lowercased():
    """Test: Unknown roles come back lower-cased, not rejected."""
    assert resolve_role("  Surveillant ") == "surveillant"
    assert not is_canonical_role("surveillant")
    assert resolve_role(None) is None
