"""Unit tests for query-string construction.

WHY: The parameter order is fixed so requests are deterministic; the
builder-call order must not leak into the route.
"""

import pytest

from deepgram_speaking_time.api.options import DEFAULT_OPTIONS, Keyword
from deepgram_speaking_time.api.routes import (
    build_query,
    build_query_params,
    build_route,
    encode_component,
)


class TestBareRoute:
    def test_no_parameters_has_no_question_mark(self):
        assert build_route(DEFAULT_OPTIONS) == "/v2/listen"

    def test_single_parameter(self):
        assert build_route(DEFAULT_OPTIONS.punctuate()) == "/v2/listen?punctuate=true"


class TestParameterOrder:
    """Route order follows the field order, not the call order."""

    def test_call_order_is_irrelevant(self):
        forward = (
            DEFAULT_OPTIONS.punctuate()
            .diarize()
            .set_alternatives_count(2)
            .filter_profanity()
            .redact_numbers()
            .redact_ssn()
            .redact_pci()
            .add_keywords(["alpha"])
            .add_search_terms(["hi"])
            .with_callback_url("https://cb.example.com/hook")
        )
        backward = (
            DEFAULT_OPTIONS.with_callback_url("https://cb.example.com/hook")
            .add_search_terms(["hi"])
            .add_keywords(["alpha"])
            .redact_pci()
            .redact_ssn()
            .redact_numbers()
            .filter_profanity()
            .set_alternatives_count(2)
            .diarize()
            .punctuate()
        )
        expected = [
            "punctuate=true",
            "diarize=true",
            "alternatives=2",
            "profanity_filter=true",
            "redact=numbers",
            "redact=ssn",
            "redact=pci",
            "keywords=alpha",
            "search=hi",
            "callback=https%3A%2F%2Fcb.example.com%2Fhook",
        ]
        assert build_query_params(forward) == expected
        assert build_query_params(backward) == expected
        assert build_route(forward) == "/v2/listen?" + "&".join(expected)

    def test_keywords_and_search_keep_insertion_order(self):
        options = DEFAULT_OPTIONS.add_search_terms(["b", "a"]).add_keywords(["z", "y"])
        assert build_query(options) == "keywords=z&keywords=y&search=b&search=a"


class TestAlternatives:
    def test_count_of_one_is_omitted_even_when_explicit(self):
        options = DEFAULT_OPTIONS.set_alternatives_count(0.4)
        assert options.alternatives_explicitly_set is True
        assert "alternatives=" not in build_route(options)
        assert build_route(options) == "/v2/listen"

    def test_count_above_one_is_emitted(self):
        assert build_query(DEFAULT_OPTIONS.set_alternatives_count(3)) == "alternatives=3"


class TestEncoding:
    def test_keyword_with_space_is_encoded(self):
        options = DEFAULT_OPTIONS.add_keywords(["New York"])
        assert build_query(options) == "keywords=New%20York"

    def test_weighted_keywords(self):
        options = DEFAULT_OPTIONS.add_keywords([Keyword("snuffleupagus", 2), ("café", 1.5)])
        assert build_query(options) == (
            "keywords=snuffleupagus:2&keywords=caf%C3%A9:1.5"
        )

    def test_search_term_reserved_characters(self):
        options = DEFAULT_OPTIONS.add_search_terms(["a&b=c"])
        assert build_query(options) == "search=a%26b%3Dc"

    def test_unreserved_marks_are_kept(self):
        assert encode_component("it's-(ok)!~*._") == "it's-(ok)!~*._"


class TestBoostFormatting:
    """Boosts print the way JavaScript prints numbers."""

    @pytest.mark.parametrize(
        "boost, expected",
        [
            (2.0, "2"),
            (-3, "-3"),
            (0.00001, "0.00001"),
            (1e-7, "1e-7"),
            (1.5e21, "1.5e+21"),
            (float("nan"), "NaN"),
            (float("inf"), "Infinity"),
        ],
    )
    def test_boost_rendering(self, boost, expected):
        options = DEFAULT_OPTIONS.add_keywords([Keyword("word", boost)])
        assert build_query(options) == "keywords=word:{}".format(expected)
