"""Unit tests for filter-graph string assembly."""

from mediaproc.filters import catalog
from mediaproc.filters.chain import FilterChain


class TestVideoFilters:
    """Tests for FilterChain.video_filters (-vf rendering)."""

    def test_empty_chain_renders_empty_string(self) -> None:
        """An empty chain produces no graph."""
        assert FilterChain().video_filters() == ""

    def test_single_filter(self) -> None:
        """One filter goes straight from [F1] to [V]."""
        assert FilterChain(("idet",)).video_filters() == "[F1]idet[V]"

    def test_two_filters_numbered_from_one(self) -> None:
        """Pads are numbered from 1 and the last pad is [V]."""
        chain = FilterChain(("a", "b"))
        assert chain.video_filters() == "[F1]a[F2];[F2]b[V]"

    def test_three_filters(self) -> None:
        chain = FilterChain(("crop=1920:800:0:140", "scale=1280:534", "setsar=1/1"))
        assert chain.video_filters() == (
            "[F1]crop=1920:800:0:140[F2];[F2]scale=1280:534[F3];[F3]setsar=1/1[V]"
        )


class TestFilterComplex:
    """Tests for FilterChain.filter_complex rendering."""

    def test_two_filters_with_output_pad(self) -> None:
        chain = FilterChain(("a", "b"))
        assert chain.filter_complex(0, 0, "vid", "out") == "[0:0]a[vid2];[vid2]b[out]"

    def test_without_output_pad(self) -> None:
        """A None output pad leaves the final output unlabelled."""
        chain = FilterChain(("a", "b"))
        assert chain.filter_complex(1, 3, "x", None) == "[1:3]a[x2];[x2]b"

    def test_single_filter(self) -> None:
        assert FilterChain(("a",)).filter_complex(0, 1, "p", "v") == "[0:1]a[v]"

    def test_empty_chain(self) -> None:
        assert FilterChain().filter_complex(0, 0, "p", "v") == ""


class TestChainEditing:
    """Tests for the immutable editing helpers."""

    def test_add_returns_new_chain(self) -> None:
        """add() leaves the original chain unchanged."""
        original = FilterChain(("a",))
        extended = original.add("b")
        assert original.filters == ("a",)
        assert extended.filters == ("a", "b")

    def test_len_and_iter(self) -> None:
        chain = FilterChain(("a", "b"))
        assert len(chain) == 2
        assert list(chain) == ["a", "b"]


class TestCatalog:
    """Tests for filter expression helpers."""

    def test_crop_filter(self) -> None:
        assert catalog.crop_filter(1920, 800, 0, 140) == "crop=1920:800:0:140"

    def test_scale_filter(self) -> None:
        assert catalog.scale_filter(1280, 720) == "scale=1280:720"

    def test_scale_match_square_uses_both_dimensions(self) -> None:
        """The fit-and-pad template is filled with width and height."""
        expr = catalog.scale_match_filter(True, 1280, 960)
        assert expr.startswith(r"scale=iw*min(1280/iw\,960/ih)")
        assert "pad=1280:960:" in expr
        assert expr.endswith("setsar=1:1")
        assert "{" not in expr

    def test_scale_match_anamorphic_expands_pixels_first(self) -> None:
        expr = catalog.scale_match_filter(False, 1280, 960)
        assert expr.startswith("scale=iw*sar:ih[a];[a]scale=-4:ih[b];[b]scale=")
        assert "pad=1280:960:" in expr

    def test_subtitle_burn_filter_escapes_path(self) -> None:
        """Colons and backslashes are escaped inside the filter argument."""
        expr = catalog.subtitle_burn_filter(r"C:\subs\movie.ass")
        assert expr == r"ass='C\:\\subs\\movie.ass'"

    def test_subtitle_burn_filter_posix_path(self) -> None:
        expr = catalog.subtitle_burn_filter("/subs/movie.ass")
        assert expr == "ass='/subs/movie.ass'"
