"""Tests for CLI main module."""

import json as _json
import pathlib as _pathlib

import click.testing as _click_testing

import protochain.cli as cli
import tests.conftest as conftest


class TestCLIBasics:
    """Help, version, and config output."""

    def test_help_shows_all_commands(self, runner: _click_testing.CliRunner) -> None:
        result = runner.invoke(cli.cli, ["--help"])

        assert result.exit_code == 0
        for cmd in ["demo", "merge", "config"]:
            assert cmd in result.output, f"Command '{cmd}' missing from help"

    def test_version_shows_current_version(self, runner: _click_testing.CliRunner) -> None:
        result = runner.invoke(cli.cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_config_show_json(self, runner: _click_testing.CliRunner) -> None:
        result = runner.invoke(cli.cli, ["config", "show", "--json"])

        assert result.exit_code == 0
        data = _json.loads(result.stdout)
        assert data["merge"]["reserved_keys"] == ["__proto__", "constructor", "prototype"]

    def test_config_show_yaml(self, runner: _click_testing.CliRunner) -> None:
        result = runner.invoke(cli.cli, ["config", "show"])

        assert result.exit_code == 0
        assert "merge:" in result.output
        assert "fold_case: false" in result.output

    def test_broken_config_file_is_reported(
        self,
        runner: _click_testing.CliRunner,
        user_config_dir: _pathlib.Path,
    ) -> None:
        (user_config_dir / "config.yaml").write_text("merge: [unclosed\n")

        result = runner.invoke(cli.cli, ["config", "show"])

        assert result.exit_code == 1
        assert "invalid YAML" in result.output


class TestMergeCommand:
    """protochain merge."""

    def test_reserved_keys_skipped(self, runner: _click_testing.CliRunner) -> None:
        result = runner.invoke(cli.cli, ["merge", conftest.UNSAFE_PAYLOAD, "--json"])

        assert result.exit_code == 0
        data = _json.loads(result.stdout)
        assert data == {"result": {"safe": 123}, "skipped": ["__proto__"]}

    def test_merges_into_target(self, runner: _click_testing.CliRunner) -> None:
        result = runner.invoke(
            cli.cli,
            ["merge", '{"b": 20, "c": 3}', "--target", '{"a": 1, "b": 2}'],
        )

        assert result.exit_code == 0
        assert _json.loads(result.stdout) == {"a": 1, "b": 20, "c": 3}

    def test_skipped_keys_reported_on_stderr(self, runner: _click_testing.CliRunner) -> None:
        result = runner.invoke(cli.cli, ["merge", conftest.UNSAFE_PAYLOAD])

        assert result.exit_code == 0
        assert _json.loads(result.stdout) == {"safe": 123}
        assert "Skipped reserved keys: __proto__" in result.stderr

    def test_payload_from_file(
        self,
        runner: _click_testing.CliRunner,
        tmp_path: _pathlib.Path,
    ) -> None:
        payload_file = tmp_path / "payload.json"
        payload_file.write_text('{"constructor": 1, "ok": true}')

        result = runner.invoke(cli.cli, ["merge", f"@{payload_file}", "--json"])

        assert result.exit_code == 0
        assert _json.loads(result.stdout) == {"result": {"ok": True}, "skipped": ["constructor"]}

    def test_extra_reserved_option(self, runner: _click_testing.CliRunner) -> None:
        result = runner.invoke(
            cli.cli,
            ["merge", '{"secret": 1, "ok": 2}', "--extra-reserved", "secret", "--json"],
        )

        assert result.exit_code == 0
        assert _json.loads(result.stdout)["result"] == {"ok": 2}

    def test_fold_case_option(self, runner: _click_testing.CliRunner) -> None:
        payload_text = '{"__PROTO__": 1, "ok": 2}'

        loose = runner.invoke(cli.cli, ["merge", payload_text, "--json"])
        strict = runner.invoke(cli.cli, ["merge", payload_text, "--fold-case", "--json"])

        assert _json.loads(loose.stdout)["result"] == {"__PROTO__": 1, "ok": 2}
        assert _json.loads(strict.stdout)["result"] == {"ok": 2}

    def test_fold_case_from_config(
        self,
        runner: _click_testing.CliRunner,
        user_config_dir: _pathlib.Path,
    ) -> None:
        (user_config_dir / "config.yaml").write_text("merge:\n  fold_case: true\n")

        result = runner.invoke(cli.cli, ["merge", '{"Constructor": 1}', "--json"])

        assert result.exit_code == 0
        assert _json.loads(result.stdout) == {"result": {}, "skipped": ["Constructor"]}

    def test_invalid_payload_is_usage_error(self, runner: _click_testing.CliRunner) -> None:
        result = runner.invoke(cli.cli, ["merge", "[1, 2]"])

        assert result.exit_code == 2
        assert "must be a JSON object" in result.output

    def test_missing_payload_file_is_usage_error(
        self,
        runner: _click_testing.CliRunner,
        tmp_path: _pathlib.Path,
    ) -> None:
        result = runner.invoke(cli.cli, ["merge", f"@{tmp_path / 'missing.json'}"])

        assert result.exit_code == 2
        assert "cannot read" in result.output

    def test_undecodable_payload_file_is_usage_error(
        self,
        runner: _click_testing.CliRunner,
        tmp_path: _pathlib.Path,
    ) -> None:
        payload_file = tmp_path / "payload.json"
        payload_file.write_bytes(b'{"a": "\xff\xfe"}')

        result = runner.invoke(cli.cli, ["merge", f"@{payload_file}"])

        assert result.exit_code == 2
        assert "cannot read" in result.output

    def test_deeply_nested_payload_is_usage_error(self, runner: _click_testing.CliRunner) -> None:
        depth = 100_000
        result = runner.invoke(cli.cli, ["merge", '{"a": ' * depth + "1" + "}" * depth])

        assert result.exit_code == 2
        assert "nested too deeply" in result.output

    def test_non_object_target_is_usage_error(self, runner: _click_testing.CliRunner) -> None:
        result = runner.invoke(cli.cli, ["merge", "{}", "--target", "[]"])

        assert result.exit_code == 2
        assert "target must be a JSON object" in result.output

    def test_verbose_logs_skipped_keys(self, runner: _click_testing.CliRunner) -> None:
        result = runner.invoke(cli.cli, ["--verbose", "merge", conftest.UNSAFE_PAYLOAD, "--json"])

        assert result.exit_code == 0
        assert _json.loads(result.stdout)["skipped"] == ["__proto__"]
        assert "Skipping reserved key" in result.stderr


class TestDemoCommand:
    """protochain demo."""

    def test_runs_every_section(self, runner: _click_testing.CliRunner) -> None:
        result = runner.invoke(cli.cli, ["demo", "--no-color"])

        assert result.exit_code == 0
        for title in [
            "1) Delegation chain lookup",
            "4) Constructor prototypes",
            "7) Merging untrusted input",
            "Done",
        ]:
            assert title in result.output
