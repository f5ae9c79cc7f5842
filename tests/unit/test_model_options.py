from __future__ import annotations

import pytest

from bundle2docx.model.options import MATCH_POLICY_ENV, ConversionOptions, MatchPolicy


def test_defaults() -> None:
    options = ConversionOptions()
    assert options.match_policy is MatchPolicy.EXACT
    assert options.placeholder_template == "[Embedded Image: {src}]"
    assert options.disallowed_tags == ("script", "style")
    assert options.output_format == "docx"


@pytest.mark.parametrize(
    ("value", "expected"),
    [("exact", MatchPolicy.EXACT), ("suffix", MatchPolicy.SUFFIX), ("SUFFIX", MatchPolicy.SUFFIX)],
)
def test_from_cli(value: str, expected: MatchPolicy) -> None:
    assert ConversionOptions.from_cli(match_policy=value).match_policy is expected


def test_from_cli_rejects_unknown_policy() -> None:
    with pytest.raises(ValueError, match="Invalid match policy 'fuzzy'"):
        ConversionOptions.from_cli(match_policy="fuzzy")


def test_from_env() -> None:
    assert ConversionOptions.from_env({}).match_policy is MatchPolicy.EXACT
    assert ConversionOptions.from_env({MATCH_POLICY_ENV: "suffix"}).match_policy is MatchPolicy.SUFFIX


def test_from_env_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(MATCH_POLICY_ENV, "suffix")
    assert ConversionOptions.from_env().match_policy is MatchPolicy.SUFFIX


def test_to_dict_and_repr() -> None:
    options = ConversionOptions(match_policy=MatchPolicy.SUFFIX)
    assert options.to_dict() == {
        "match_policy": "suffix",
        "placeholder_template": "[Embedded Image: {src}]",
        "disallowed_tags": ["script", "style"],
        "output_format": "docx",
    }
    assert repr(options).startswith("ConversionOptions(match_policy=suffix, ")
