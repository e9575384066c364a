from __future__ import annotations

from pathlib import Path

import pytest

from fitmerge.cli import app, run_cli
from fitmerge.cli.errors import CliError, ErrorPayload, status_code_for
from fitmerge.cli.parser import USAGE_MESSAGE, build_parser, build_request, normalise_argv
from fitmerge.errors import ErrorKind, MergeError
from fitmerge.fusion import FusionState
from fitmerge.merge import MSG_MERGE_SUCCESS, MergeResult, MergeSummary

from tests.conftest import write_pyproject


@pytest.fixture(autouse=True)
def _workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_normalise_argv_maps_windows_help() -> None:
    assert normalise_argv(["/?", "-g", "a.fit"]) == ["--help", "-g", "a.fit"]


def test_parser_collects_switches_and_intermixed_positionals() -> None:
    namespace = build_parser().parse_intermixed_args(
        ["first.fit", "-g", "primary.fit", "-z", "second.fit", "third.fit", "-o", "out.fit", "-f"]
    )

    request = build_request(namespace)

    assert request.primary_path == Path("primary.fit")
    assert request.secondary_paths == [
        Path("second.fit"),
        Path("first.fit"),
        Path("third.fit"),
    ]
    assert request.output_path == Path("out.fit")
    assert request.allow_overwrite is True


def test_output_force_switch_sets_output_and_overwrite() -> None:
    namespace = build_parser().parse_intermixed_args(
        ["-g", "primary.fit", "ride.fit", "-of", "out.fit"]
    )

    request = build_request(namespace)

    assert request.output_path == Path("out.fit")
    assert request.allow_overwrite is True


def test_parser_defaults_come_from_config() -> None:
    namespace = build_parser({"logging": {"level": "debug", "format": "text"}}).parse_intermixed_args(
        ["ride.fit"]
    )

    assert namespace.log_level == "debug"
    assert namespace.log_format == "text"
    assert namespace.log_output == "stderr"
    assert build_request(namespace).allow_overwrite is False


@pytest.mark.parametrize("argv", [[], ["/?"], ["-g", "a.fit", "--help"]])
def test_usage_is_printed(argv, capsys: pytest.CaptureFixture[str]) -> None:
    result = run_cli(argv)

    assert result == USAGE_MESSAGE
    assert "-g primary_file" in capsys.readouterr().out


@pytest.mark.parametrize(
    "argv",
    [
        pytest.param(["-g"], id="missing-value"),
        pytest.param(["-g", "a.fit", "--bogus"], id="unknown-switch"),
        pytest.param(["--log-format", "xml", "b.fit"], id="bad-choice"),
    ],
)
def test_malformed_arguments_exit_with_usage_status(
    argv, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(argv)

    assert excinfo.value.code == 2
    assert "Error reading input arguments." in capsys.readouterr().out


@pytest.mark.parametrize(
    ("argv", "message"),
    [
        pytest.param(
            ["-z", "ride.fit"],
            "You must provide one primary input file.",
            id="no-primary",
        ),
        pytest.param(
            ["-g", "primary.fit"],
            "You must provide at least one secondary input file.",
            id="no-secondary",
        ),
    ],
)
def test_missing_inputs_exit_with_usage_status(
    argv, message: str, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(argv)

    assert excinfo.value.code == 2
    assert capsys.readouterr().out.strip() == message


def test_missing_file_exits_with_not_found_status(
    _workdir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(["-g", "primary.fit", "-z", "absent.fit"])

    assert excinfo.value.code == 4
    assert "File not found: absent.fit" in capsys.readouterr().out


def test_errors_are_logged_as_json(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        run_cli(["-g", "primary.fit"])

    err = capsys.readouterr().err
    assert '"event": "cli.error"' in err
    assert '"status_code": 2' in err


def test_successful_merge_reports_success(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured = {}

    def fake_run_merge(request, settings):
        captured["request"] = request
        captured["settings"] = settings
        return MergeResult(
            summary=MergeSummary(Path("out.fit"), (Path("ride.fit"),), FusionState())
        )

    monkeypatch.setattr(app, "run_merge", fake_run_merge)

    result = run_cli(["-g", "primary.fit", "ride.fit", "-of", "out.fit"])

    assert result == MSG_MERGE_SUCCESS
    assert capsys.readouterr().out.strip() == MSG_MERGE_SUCCESS
    request = captured["request"]
    assert request.primary_path == Path("primary.fit")
    assert request.secondary_paths == [Path("ride.fit")]
    assert request.allow_overwrite is True


def test_unexpected_failure_exits_with_runtime_status(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(
        app,
        "run_merge",
        lambda request, settings: MergeResult(error=MergeError(ErrorKind.UNEXPECTED)),
    )

    with pytest.raises(SystemExit) as excinfo:
        run_cli(["-g", "primary.fit", "ride.fit"])

    assert excinfo.value.code == 1
    assert "Caught an unexpected exception." in capsys.readouterr().out


def test_cli_merges_real_files(fit_files, capsys: pytest.CaptureFixture[str]) -> None:
    primary, secondary = fit_files
    output = secondary.parent / "combined.fit"

    result = run_cli(["-g", str(primary), "-z", str(secondary), "-o", str(output)])

    assert result == MSG_MERGE_SUCCESS
    assert output.exists()

    with pytest.raises(SystemExit) as excinfo:
        run_cli(["-g", str(primary), "-z", str(secondary), "-o", str(output)])
    assert excinfo.value.code == 2

    assert run_cli(["-g", str(primary), "-z", str(secondary), "-of", str(output)]) == MSG_MERGE_SUCCESS
    capsys.readouterr()


def test_cli_error_payload_follows_merge_error() -> None:
    error = CliError(MergeError(ErrorKind.INTEGRITY_CHECK_FAILED, path="broken.fit"))

    assert error.kind is ErrorKind.INTEGRITY_CHECK_FAILED
    assert error.status_code == 3
    assert error.payload.as_dict() == {
        "kind": "IntegrityCheckFailed",
        "category": "io",
        "status_code": 3,
        "message": "Fit file failed integrity check: broken.fit",
        "path": "broken.fit",
    }


@pytest.mark.parametrize(
    ("kind", "status"),
    [
        pytest.param(ErrorKind.NO_PRIMARY_PATH, 2, id="usage"),
        pytest.param(ErrorKind.OUTPUT_WRITE_FAILURE, 3, id="io"),
        pytest.param(ErrorKind.FILE_NOT_FOUND, 4, id="not-found"),
        pytest.param(ErrorKind.SOURCE_MISMATCH, 1, id="runtime"),
    ],
)
def test_payload_status_comes_from_kind(kind: ErrorKind, status: int) -> None:
    payload = ErrorPayload.from_merge_error(MergeError(kind, path="a.fit"))

    assert payload.kind is kind
    assert payload.status_code == status


def test_unknown_category_is_runtime() -> None:
    assert status_code_for("surprise") == 1


def test_argument_errors_keep_parser_detail(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        run_cli(["-g", "a.fit", "--bogus"])

    err = capsys.readouterr().err
    assert '"kind": "ArgumentFormat"' in err
    assert "--bogus" in err


@pytest.mark.parametrize(
    "use_config_switch",
    [pytest.param(False, id="working-directory"), pytest.param(True, id="config-switch")],
)
def test_malformed_config_exits_with_usage_status(
    use_config_switch: bool, _workdir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    pyproject = write_pyproject(_workdir, "[tool.fitmerge\nlevel = 1\n")
    argv = ["-g", "a.fit", "-z", "b.fit"]
    if use_config_switch:
        argv += ["--config", str(pyproject)]

    with pytest.raises(SystemExit) as excinfo:
        run_cli(argv)

    assert excinfo.value.code == 2
    assert capsys.readouterr().out.strip() == (
        f"Can not read configuration file: {pyproject.resolve()}"
    )


def test_unreadable_config_names_the_file(_workdir: Path) -> None:
    (_workdir / "pyproject.toml").mkdir()

    with pytest.raises(SystemExit) as excinfo:
        run_cli(["-g", "a.fit", "-z", "b.fit"])

    assert excinfo.value.code == 2
    assert isinstance(excinfo.value.__cause__, CliError)
    assert excinfo.value.__cause__.kind is ErrorKind.CONFIGURATION_INVALID
