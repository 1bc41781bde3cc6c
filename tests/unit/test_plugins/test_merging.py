"""Tests for merge strategies."""

from story_linter.models.extraction import FileExtraction
from story_linter.plugins.merging import concat, first_wins


def _items(*payloads) -> list[FileExtraction]:
    return [
        FileExtraction(extractor="k", file=f"/{i}.md", payload=payload)
        for i, payload in enumerate(payloads)
    ]


class TestConcat:
    """Tests for concat."""

    def test_flattens_in_order(self) -> None:
        """Test payloads are joined in file order."""
        assert concat(_items((1, 2), (), (3,))) == (1, 2, 3)

    def test_none_payload(self) -> None:
        """Test missing payloads are skipped."""
        assert concat(_items(None, [4])) == (4,)


class TestFirstWins:
    """Tests for first_wins."""

    def test_first_value_kept(self) -> None:
        """Test later duplicates are ignored."""
        merged = first_wins(_items({"a": 1, "b": 2}, {"a": 9, "c": 3}))
        assert merged == {"a": 1, "b": 2, "c": 3}
        assert list(merged) == ["a", "b", "c"]

    def test_combine_hook(self) -> None:
        """Test combine folds later values into the kept one."""
        items = _items({"a": [1]}, {"a": [2]})
        merged = first_wins(items, combine=lambda kept, later: kept + later)
        assert merged == {"a": [1, 2]}
