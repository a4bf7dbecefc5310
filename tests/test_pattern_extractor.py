"""Tests for proximity-based code/name pairing."""
from filmwaiver.parse.extractors.pattern_extractor import extract_by_proximity
from filmwaiver.parse.patterns import is_plausible_code, span_distance, strip_tags

BASE_URL = "https://filmfreeway.com"


def test_pairs_code_with_nearest_festival_name():
    """Test that each code takes the closest festival phrase and offer."""
    html = """
    <html><body>
    <p>This week: use code SUNDANCE25 for 25% off at the Sundance Film Festival.</p>
    <p>Tribeca Festival entries: TRIBECA20 gets $20 off.</p>
    </body></html>
    """
    result = extract_by_proximity(html, BASE_URL)

    assert [r.code for r in result] == ["SUNDANCE25", "TRIBECA20"]
    assert result[0].festival_name == "Sundance Film Festival"
    assert result[0].offer == "25% off"
    assert result[1].festival_name == "Tribeca Festival"
    assert result[1].offer == "$20 off"
    assert all(r.source == "filmfreeway_pattern" for r in result)


def test_code_without_nearby_name_is_skipped():
    """Test that lone codes are not paired with anything."""
    html = "<p>Use WELCOME10 at checkout.</p>"
    assert extract_by_proximity(html, BASE_URL) == []


def test_name_too_far_away_is_ignored():
    """Test the maximum pairing distance."""
    filler = "lorem ipsum " * 30
    html = f"<p>Sundance Film Festival</p><p>{filler} SUNDANCE25</p>"
    assert extract_by_proximity(html, BASE_URL) == []


def test_scripts_are_not_scanned():
    """Test that script bodies are removed before scanning."""
    html = '<script>var x = "Sundance Film Festival ABC123";</script><p>Nothing here</p>'
    assert extract_by_proximity(html, BASE_URL) == []


def test_strip_tags_unescapes_and_breaks_blocks():
    """Test plain-text flattening."""
    text = strip_tags("<div>Film &amp; TV</div><div>Next</div>")
    assert text.split("\n") == ["Film & TV", "Next"]


def test_is_plausible_code():
    """Test the code token filter."""
    assert is_plausible_code("SUNDANCE25")
    assert not is_plausible_code("2025")
    assert not is_plausible_code("SUNDANCE")
    assert not is_plausible_code("FILM")
    assert not is_plausible_code("AB1")


def test_span_distance():
    """Test distances between spans."""
    assert span_distance((0, 5), (10, 12)) == 5
    assert span_distance((20, 25), (10, 12)) == 8
    assert span_distance((0, 15), (10, 12)) == 0
