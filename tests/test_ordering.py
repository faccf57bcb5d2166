"""Tests for the default application ordering."""

from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path

from core.domain.models import ApplicationGroup
from core.services.ordering import build_order_key, detect_local_app_name


class TestDetectLocalAppName:
    def test_reads_now_json_first(self, tmp_path: Path) -> None:
        (tmp_path / "now.json").write_text(json.dumps({"name": "from-now"}), encoding="utf-8")
        (tmp_path / "package.json").write_text(json.dumps({"name": "from-package"}), encoding="utf-8")

        assert detect_local_app_name(tmp_path) == "from-now"

    def test_falls_back_to_package_json(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(json.dumps({"name": "web"}), encoding="utf-8")

        assert detect_local_app_name(tmp_path) == "web"

    def test_ignores_broken_files(self, tmp_path: Path) -> None:
        (tmp_path / "now.json").write_text("{not json", encoding="utf-8")
        (tmp_path / "package.json").write_text(json.dumps(["no", "name"]), encoding="utf-8")

        assert detect_local_app_name(tmp_path) is None

    def test_no_project(self, tmp_path: Path) -> None:
        assert detect_local_app_name(tmp_path) is None

    def test_explicit_local_config(self, tmp_path: Path) -> None:
        (tmp_path / "now.json").write_text(json.dumps({"name": "from-cwd"}), encoding="utf-8")
        config = tmp_path / "deploy" / "staging.json"
        config.parent.mkdir()
        config.write_text(json.dumps({"name": "staging-app"}), encoding="utf-8")

        assert detect_local_app_name(tmp_path, local_config=config) == "staging-app"

    def test_missing_local_config(self, tmp_path: Path) -> None:
        (tmp_path / "now.json").write_text(json.dumps({"name": "from-cwd"}), encoding="utf-8")

        assert detect_local_app_name(tmp_path, local_config=tmp_path / "absent.json") is None


class TestOrderKey:
    def test_local_app_first(self, make_deployment) -> None:
        groups = [
            ApplicationGroup("recent", [make_deployment("recent", age=timedelta(minutes=1))]),
            ApplicationGroup("mine", [make_deployment("mine", age=timedelta(days=30))]),
        ]

        ordered = sorted(groups, key=build_order_key("mine"))

        assert [g.name for g in ordered] == ["mine", "recent"]

    def test_newest_member_decides(self, make_deployment) -> None:
        groups = [
            ApplicationGroup(
                "a",
                [make_deployment("a", age=timedelta(days=2)), make_deployment("a", age=timedelta(minutes=1))],
            ),
            ApplicationGroup("b", [make_deployment("b", age=timedelta(hours=1))]),
        ]

        ordered = sorted(groups, key=build_order_key())

        assert [g.name for g in ordered] == ["a", "b"]

    def test_ties_broken_by_name(self, make_deployment) -> None:
        groups = [
            ApplicationGroup("b", [make_deployment("b", age=None)]),
            ApplicationGroup("a", [make_deployment("a", age=None)]),
        ]

        ordered = sorted(groups, key=build_order_key())

        assert [g.name for g in ordered] == ["a", "b"]

    def test_naive_timestamps_read_as_utc(self, make_deployment, now) -> None:
        created = now - timedelta(hours=1)
        naive = ApplicationGroup("a", [make_deployment("a", age=None, created=created.replace(tzinfo=None))])
        aware = ApplicationGroup("a", [make_deployment("a", age=None, created=created)])

        key = build_order_key()

        assert key(naive) == key(aware)
