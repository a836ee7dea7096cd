from __future__ import annotations

from childcare_app.importer.pipeline import FamilyReference, FamilyResolver, family_key


def test_family_key_is_trimmed_and_case_insensitive():
    assert family_key("Smith") == family_key("smith") == family_key("SMITH ")
    assert family_key("Van  Wyk") != family_key("Van Wyk")


def test_unknown_family_is_created_with_first_seen_spelling():
    resolver = FamilyResolver()

    resolution = resolver.resolve(FamilyReference(name=" Smith "))

    assert resolution.action == "create"
    assert resolution.name == "Smith"
    assert resolution.family_id is None


def test_registered_family_is_reused_for_spelling_variants():
    resolver = FamilyResolver()
    resolver.register(7, "Smith")

    for spelling in ("Smith", "smith", "SMITH "):
        resolution = resolver.resolve(FamilyReference(name=spelling))
        assert resolution.action == "existing"
        assert resolution.family_id == 7
        assert resolution.warning is None


def test_ambiguous_match_links_lowest_id_with_warning():
    resolver = FamilyResolver([(12, "Jones"), (4, "JONES"), (9, "Brown")])

    resolution = resolver.resolve(FamilyReference(name="jones"))

    assert resolution.action == "existing"
    assert resolution.family_id == 4
    assert "ids 4, 12" in resolution.warning
    assert len(resolver) == 3


def test_projected_families_are_reported_without_ids():
    resolver = FamilyResolver()
    resolver.project("Smith")

    resolution = resolver.resolve(FamilyReference(name="SMITH"))

    assert resolution.action == "projected"
    assert resolution.family_id is None
