"""Tests for choosing the directory the rotating log file lives in."""

from __future__ import annotations

import pathlib
from types import SimpleNamespace

import pytest

from action_dispatch.core import logging as dispatch_logging

# pylint: disable=missing-function-docstring,protected-access


@pytest.fixture
def layout(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch):
    root_dir = tmp_path / "deploy"
    monkeypatch.setattr(dispatch_logging, "ROOT_DIR", root_dir)
    monkeypatch.setattr(dispatch_logging, "BASE_DIR", root_dir / "action_dispatch")

    def configure(log_dir: pathlib.Path | None) -> SimpleNamespace:
        settings = SimpleNamespace(
            ACTION_DISPATCH_LOG_LEVEL="info",
            ACTION_DISPATCH_LOG_DIR=log_dir,
            DATA_DIR=tmp_path / "data",
        )
        monkeypatch.setattr(dispatch_logging, "settings", settings)
        return settings

    return root_dir, configure


def test_configured_log_dir_wins(layout, tmp_path: pathlib.Path) -> None:
    _, configure = layout
    configure(tmp_path / "custom-logs")
    resolved = dispatch_logging._resolve_logs_dir()
    assert resolved == tmp_path / "custom-logs"
    assert resolved.is_dir()


def test_without_override_uses_repository_logs(layout) -> None:
    root_dir, configure = layout
    configure(None)
    assert dispatch_logging._resolve_logs_dir() == root_dir / "logs"


def test_unwritable_candidates_fall_through_to_data_dir(
    layout, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    root_dir, configure = layout
    override = tmp_path / "locked"
    configure(override)
    blocked = {override, root_dir / "logs"}
    original_mkdir = pathlib.Path.mkdir

    def guarded_mkdir(path_obj: pathlib.Path, *args, **kwargs):
        if path_obj in blocked:
            raise PermissionError("read-only")
        return original_mkdir(path_obj, *args, **kwargs)

    monkeypatch.setattr(pathlib.Path, "mkdir", guarded_mkdir)
    assert dispatch_logging._resolve_logs_dir() == tmp_path / "data" / "logs"


def test_no_writable_candidate_raises(layout, monkeypatch: pytest.MonkeyPatch) -> None:
    _, configure = layout
    configure(None)

    def refuse(*_args, **_kwargs):
        raise PermissionError("read-only")

    monkeypatch.setattr(pathlib.Path, "mkdir", refuse)
    with pytest.raises(PermissionError):
        dispatch_logging._resolve_logs_dir()
