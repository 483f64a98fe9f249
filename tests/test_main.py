"""
Tests for the command line entry point.
"""

import json

import pytest

from main import build_config, build_parser, main


SMALL_RUN = ["--synthetic", "30", "--population", "10", "--generations", "3", "--seed", "5"]


class TestCommandLine:
    """Test suite for the teambuilder command."""

    def test_json_output(self, capsys):
        """Test a synthetic GBL search printed as JSON."""
        exit_code = main(SMALL_RUN + ["--json"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["mode"] == "GBL"
        assert len(output["team"]) == 3
        assert output["generations_run"] == 3
        assert [m["species_id"] for m in output["members"]] == output["team"]

    def test_text_output(self, capsys):
        """Test the human-readable summary."""
        exit_code = main(SMALL_RUN + ["--mode", "PlayPokemon"])

        assert exit_code == 0
        out = capsys.readouterr().out
        assert out.startswith("Best PlayPokemon team")
        assert "Breakdown:" in out
        assert " 6. " in out

    def test_unknown_mode(self, capsys):
        """Test the exit code for an unknown tournament format."""
        exit_code = main(SMALL_RUN + ["--mode", "Raids"])

        assert exit_code == 1
        assert "error" in capsys.readouterr().err

    def test_too_many_anchors(self, capsys):
        """Test the exit code for more anchors than slots."""
        anchors = []
        for key in ("a", "b", "c", "d"):
            anchors += ["--anchor", key]

        exit_code = main(SMALL_RUN + anchors)

        assert exit_code == 1
        assert "exceed the team size" in capsys.readouterr().err

    @pytest.mark.parametrize("flags", [
        ["--population", "2"],
        ["--population", "1"],
        ["--generations", "0"],
    ])
    def test_rejected_search_settings(self, flags, capsys):
        """Test the exit code for flag values the configuration rejects."""
        exit_code = main(["--synthetic", "20", "--seed", "5"] + flags)

        assert exit_code == 1
        assert "invalid configuration" in capsys.readouterr().err

    def test_missing_data_dir(self, tmp_path, capsys):
        """Test the exit code when the knowledge base cannot be loaded."""
        exit_code = main(["--data-dir", str(tmp_path / "absent"), "--generations", "1"])

        assert exit_code == 1
        assert "Data directory not found" in capsys.readouterr().err


class TestArguments:
    """Test suite for argument handling."""

    def test_anchor_order_is_kept(self):
        """Test repeated --anchor flags."""
        args = build_parser().parse_args(["--anchor", "medicham", "--anchor", "azumarill"])

        assert args.anchor == ["medicham", "azumarill"]
        assert args.mode == "GBL"

    @pytest.mark.parametrize("flags, field, expected", [
        (["--population", "30"], "population_size", 30),
        (["--generations", "9"], "generations", 9),
    ])
    def test_overrides_reach_evolution(self, flags, field, expected):
        """Test command-line overrides of the evolution parameters."""
        config = build_config(build_parser().parse_args(flags))

        assert getattr(config.evolution, field) == expected

    def test_seed_and_bracket_overrides(self):
        """Test general overrides."""
        config = build_config(build_parser().parse_args(["--seed", "3", "--bracket", "cp1500"]))

        assert config.random_seed == 3
        assert config.bracket == "cp1500"
