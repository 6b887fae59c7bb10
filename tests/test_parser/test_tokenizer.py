"""Tests for clicore.parser -- the argument tokenizer.

Covers:
- Arguments only, flags only, mixed tokens
- Flags at end of input and flags followed by flags
- Longest-prefix matching
- Type inference (bool, int, float, null, "undefined")
- Disabled flag parsing and empty prefix sets
- ``ignore_empty_flags`` post-pass
- Empty flag names with and without ``parse_empty_flags``
"""

from __future__ import annotations

import pytest

from clicore.models import FlagOptions, ParsedArguments
from clicore.parser import Parser, infer_type


def parse(tokens: list[str], **options) -> ParsedArguments:
    return Parser(FlagOptions(**options)).parse(tokens)


# ------------------------------------------------------------------ #
# infer_type
# ------------------------------------------------------------------ #


class TestInferType:
    @pytest.mark.parametrize(
        "token, expected",
        [
            ("true", True),
            ("false", False),
            ("null", None),
            ("1", 1),
            ("-12", -12),
            ("3.5", 3.5),
            (".5", 0.5),
            ("1e3", 1000.0),
            ("abc", "abc"),
            ("undefined", "undefined"),
            ("True", "True"),
            ("", ""),
        ],
    )
    def test_inference(self, token: str, expected: object) -> None:
        result = infer_type(token)
        assert result == expected
        assert type(result) is type(expected)

    def test_huge_integer_stays_a_string(self) -> None:
        token = "9" * 5000
        assert infer_type(token) == token

    def test_huge_integer_flag_value(self) -> None:
        token = "9" * 5000
        result = Parser(FlagOptions()).parse(["--n", token, "rest"])
        assert result.flags == {"n": token}
        assert result.args == ["rest"]


# ------------------------------------------------------------------ #
# Parser.parse
# ------------------------------------------------------------------ #


class TestParse:
    def test_empty_input(self) -> None:
        assert parse([]) == ParsedArguments(args=[], flags={})

    def test_only_arguments(self) -> None:
        result = parse(["a", "b", "c"])
        assert result.args == ["a", "b", "c"]
        assert result.flags == {}

    def test_arguments_are_not_inferred(self) -> None:
        result = parse(["1", "true", "null"])
        assert result.args == ["1", "true", "null"]

    def test_flags_without_values(self) -> None:
        result = parse(["--a", "-b", "-C"])
        assert result.args == []
        assert result.flags == {"a": None, "b": None, "C": None}

    def test_flags_with_values(self) -> None:
        result = parse(["--a", "1", "-b", "false", "-C", "text"])
        assert result.flags == {"a": 1, "b": False, "C": "text"}

    def test_mixed_tokens(self) -> None:
        result = parse(["a", "b", "-a", "1", "-C"])
        assert result.args == ["a", "b"]
        assert result.flags == {"a": 1, "C": None}

    def test_flag_consumes_exactly_one_value(self) -> None:
        result = parse(["--env", "prod", "deploy", "now"])
        assert result.flags == {"env": "prod"}
        assert result.args == ["deploy", "now"]

    def test_flag_at_end_of_input_is_none(self) -> None:
        assert parse(["run", "--verbose"]).flags == {"verbose": None}

    def test_flag_followed_by_flag_is_none(self) -> None:
        result = parse(["--first", "--second", "value"])
        assert result.flags == {"first": None, "second": "value"}

    def test_repeated_flag_keeps_last_value(self) -> None:
        assert parse(["-n", "1", "-n", "2"]).flags == {"n": 2}

    def test_longest_prefix_wins(self) -> None:
        """``--x`` is the flag ``x``, never the flag ``-x``."""
        result = parse(["--x", "1"], prefixes=["-", "--"])
        assert result.flags == {"x": 1}

    def test_custom_prefixes(self) -> None:
        result = parse(["/out", "file.txt", "+v"], prefixes=["/", "+"])
        assert result.flags == {"out": "file.txt", "v": None}

    def test_no_type_inference(self) -> None:
        result = parse(["-d", "1", "-f", "true", "-g", "null"], infer_types=False)
        assert result.flags == {"d": "1", "f": "true", "g": "null"}

    def test_undefined_stays_a_string(self) -> None:
        assert parse(["-h", "undefined"]).flags == {"h": "undefined"}


class TestDisabledParsing:
    def test_parse_disabled(self) -> None:
        tokens = ["a", "b", "c", "-d", "1", "-e"]
        result = parse(tokens, parse=False)
        assert result.args == tokens
        assert result.flags == {}

    def test_only_empty_prefixes(self) -> None:
        tokens = ["a", "--b", "1"]
        result = parse(tokens, prefixes=["", ""])
        assert result.args == tokens
        assert result.flags == {}

    def test_prefixes_are_deduplicated_and_sorted(self) -> None:
        parser = Parser(FlagOptions(prefixes=["-", "", "--", "-"]))
        assert parser.prefixes == ["--", "-"]


class TestIgnoreEmptyFlags:
    def test_drops_flags_without_values(self) -> None:
        tokens = [
            "a", "b", "c",
            "-d", "1",
            "-e",
            "-f", "true",
            "-g", "null",
            "-h", "undefined",
            "-i", "abc",
        ]
        result = parse(tokens, ignore_empty_flags=True)
        assert result.args == ["a", "b", "c"]
        assert result.flags == {"d": 1, "f": True, "g": None, "h": "undefined", "i": "abc"}

    def test_trailing_flag_is_dropped(self) -> None:
        assert parse(["-x", "1", "--last"], ignore_empty_flags=True).flags == {"x": 1}

    def test_explicit_null_later_overridden_by_bare_flag(self) -> None:
        result = parse(["-g", "null", "-g"], ignore_empty_flags=True)
        assert result.flags == {}

    def test_without_inference_null_is_text(self) -> None:
        result = parse(["-g", "null", "-e"], ignore_empty_flags=True, infer_types=False)
        assert result.flags == {"g": "null"}


class TestEmptyFlagNames:
    def test_bare_prefix_is_an_argument_by_default(self) -> None:
        result = parse(["--", "value"])
        assert result.args == ["--", "value"]
        assert result.flags == {}

    def test_bare_prefix_is_an_empty_flag_when_enabled(self) -> None:
        result = parse(["--", "value"], parse_empty_flags=True)
        assert result.args == []
        assert result.flags == {"": "value"}

    def test_empty_flag_at_end(self) -> None:
        assert parse(["a", "-"], parse_empty_flags=True).flags == {"": None}
