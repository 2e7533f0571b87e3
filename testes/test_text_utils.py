import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from blog_migrator.utils.text import external_id_for, matches_pattern, part_title, rewrite_domains


def test_rewrite_domains_replaces_every_occurrence():
    html = '<a href="https://old.shop/a">x</a><img src="https://old.shop/b.png"/>'
    assert rewrite_domains(html, "old.shop", "new.shop") == '<a href="https://new.shop/a">x</a><img src="https://new.shop/b.png"/>'


def test_rewrite_domains_is_noop_without_both_domains():
    assert rewrite_domains("<p>old.shop</p>", "", "new.shop") == "<p>old.shop</p>"
    assert rewrite_domains("<p>old.shop</p>", "old.shop", "") == "<p>old.shop</p>"
    assert rewrite_domains(None, "old.shop", "new.shop") is None


def test_part_title_substitutes_number():
    assert part_title("My post", 2, " (Part {n})") == "My post (Part 2)"
    assert part_title("My post", 3, " - {n}/{n}") == "My post - 3/3"


def test_external_ids():
    assert external_id_for(123) == "migrated:article:123"
    assert external_id_for("123", 4) == "migrated:article:123:part:4"


def test_matches_pattern_wildcards_are_case_insensitive():
    assert matches_pattern("2024-Review", "2024-*")
    assert matches_pattern("A Python TUTORIAL for all", "*tutorial*")
    assert not matches_pattern("Tutorial", "2024-*")


def test_matches_pattern_other_characters_are_literal():
    assert matches_pattern("v1.2 (beta)", "v1.2 (beta)")
    assert not matches_pattern("v1x2", "v1.2")
    assert not matches_pattern("prefix-title", "title")


def test_empty_pattern_matches_everything():
    assert matches_pattern("anything", None)
    assert matches_pattern("anything", "")
    assert not matches_pattern(None, "x*")
