"""Tests for reference extraction from PR text."""

from prereq.models import PRRef
from prereq.parse import extract_deps, has_intent


def ref(owner: str, repo: str, num: int) -> PRRef:
    return PRRef(owner=owner, repo=repo, num=num)


class TestReferences:
    """Reference shapes and resolution against the PR's repository."""

    def test_bare_number_resolves_to_same_repo(self) -> None:
        """'fixes #7' -> acme/widgets#7, not enforced."""
        result = extract_deps("fixes #7", "acme", "widgets")
        assert result.deps == {ref("acme", "widgets", 7)}
        assert result.enforce is False

    def test_fully_qualified_and_enforced(self) -> None:
        """Two qualified references with intent keywords."""
        result = extract_deps("depends on acme/widgets#3 and needs other/repo#9", "acme", "widgets")
        assert result.deps == {ref("acme", "widgets", 3), ref("other", "repo", 9)}
        assert result.enforce is True

    def test_same_org_resolves_against_owner(self) -> None:
        """repo#N uses the PR's owner."""
        result = extract_deps("Blocked by gadgets#12", "acme", "widgets")
        assert result.deps == {ref("acme", "gadgets", 12)}
        assert result.enforce is True

    def test_qualified_reference_not_recaptured_by_looser_pattern(self) -> None:
        """other/repo#9 does not also yield acme/repo#9 or acme/widgets#9."""
        result = extract_deps("see other/repo#9", "acme", "widgets")
        assert result.deps == {ref("other", "repo", 9)}

    def test_duplicates_are_merged(self) -> None:
        """Same PR referenced in several shapes appears once."""
        text = "#4, widgets#4 and acme/widgets#4"
        result = extract_deps(text, "acme", "widgets")
        assert result.deps == {ref("acme", "widgets", 4)}

    def test_references_across_lines(self) -> None:
        """Text is scanned as a whole, not line by line."""
        text = "Title\n\nRequires:\n- #1\n- lib#2\n- org/tool#3"
        result = extract_deps(text, "acme", "widgets")
        assert result.deps == {
            ref("acme", "widgets", 1),
            ref("acme", "lib", 2),
            ref("org", "tool", 3),
        }

    def test_owner_and_repo_are_case_sensitive(self) -> None:
        """Acme/Widgets#1 and acme/widgets#1 are different references."""
        result = extract_deps("Acme/Widgets#1 acme/widgets#1", "acme", "widgets")
        assert result.deps == {ref("Acme", "Widgets", 1), ref("acme", "widgets", 1)}

    def test_self_reference_is_extracted(self) -> None:
        """A PR mentioning its own number is kept as a reference."""
        result = extract_deps("depends on #5", "acme", "widgets")
        assert ref("acme", "widgets", 5) in result.deps

    def test_hash_inside_word_is_not_bare_reference(self) -> None:
        """'abc#1' is a same-org reference, never a bare #1."""
        result = extract_deps("abc#1", "acme", "widgets")
        assert result.deps == {ref("acme", "abc", 1)}

    def test_zero_is_ignored(self) -> None:
        """#0 is not a valid PR number."""
        assert extract_deps("#0", "acme", "widgets").deps == frozenset()

    def test_non_ascii_letter_before_hash_is_bare_reference(self) -> None:
        """'café#3': é is not a word character, so #3 is a bare reference."""
        result = extract_deps("café#3", "acme", "widgets")
        assert result.deps == {ref("acme", "widgets", 3)}

    def test_str_renders_owner_repo_number(self) -> None:
        """PRRef renders as owner/repo#num."""
        assert str(ref("acme", "widgets", 7)) == "acme/widgets#7"


class TestEmptyAndIntent:
    """Empty input and enforcement keyword detection."""

    def test_empty_text(self) -> None:
        """Empty text has no references and no intent."""
        result = extract_deps("", "acme", "widgets")
        assert result.deps == frozenset()
        assert result.enforce is False

    def test_none_text(self) -> None:
        """None is handled like empty text."""
        result = extract_deps(None, "acme", "widgets")
        assert result.deps == frozenset()
        assert result.enforce is False

    def test_keyword_without_references(self) -> None:
        """Intent is reported even without references."""
        result = extract_deps("This needs more work", "acme", "widgets")
        assert result.deps == frozenset()
        assert result.enforce is True

    def test_intent_is_case_insensitive(self) -> None:
        """Keywords match in any letter case."""
        for text in ("DEPENDS ON #1", "Merge First #1", "Prerequisite: #1", "blocked BY #1"):
            assert has_intent(text), text

    def test_no_intent(self) -> None:
        """Closing keywords are not dependency intent."""
        assert not has_intent("closes #1")
        assert not has_intent(None)

    def test_deterministic(self) -> None:
        """Same text gives the same result on repeated calls."""
        text = "depends on a/b#1, c#2 and #3"
        assert extract_deps(text, "o", "r") == extract_deps(text, "o", "r")
