from __future__ import annotations

import json
from pathlib import Path

import pytest

from pogen import cli
from pogen.generator import GenerationResult, PageObjectGenerator
from pogen.metadata_store import PageObjectMetadata, load_metadata, save_metadata
from pogen.models import ElementDescriptor, SemanticCategory
from pogen.pipeline import resolve_batch


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


def _snapshot(path: Path, *entries: tuple[ElementDescriptor, SemanticCategory]) -> Path:
    metadata = PageObjectMetadata(
        url="https://example.com/login",
        page_name="Login",
        batch=resolve_batch(entries),
        generated_at="2024-05-01T12:00:00+00:00",
    )
    return save_metadata(path, metadata)


def _email(label: str = "Email") -> tuple[ElementDescriptor, SemanticCategory]:
    return ElementDescriptor(tag="input", aria_label="Email", label=label), SemanticCategory.INPUT


def _fake_generate_from_url(entries):
    def generate_from_url(self: PageObjectGenerator, url: str, page_name: str, **_kwargs) -> GenerationResult:
        return self.generate(page_name, url, entries)

    return generate_from_url


def test_diff_without_changes_exits_zero(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    old = _snapshot(tmp_path / "old.json", _email())
    new = _snapshot(tmp_path / "new.json", _email())

    assert cli.main(["diff", str(old), str(new)]) == cli.EXIT_OK
    assert capsys.readouterr().out.strip() == "No changes detected."


def test_diff_with_changes_exits_two_and_writes_plan(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    old = _snapshot(tmp_path / "old.json", _email())
    new = _snapshot(
        tmp_path / "new.json",
        _email(),
        (ElementDescriptor(tag="input", label="Phone"), SemanticCategory.INPUT),
    )
    plan_path = tmp_path / "plan.json"

    exit_code = cli.main(["diff", str(old), str(new), "--format", "json", "--plan", str(plan_path)])

    assert exit_code == cli.EXIT_DRIFT
    report = json.loads(capsys.readouterr().out)
    assert report["summary"] == {"added": 1, "removed": 0, "modified": 0, "unchanged": 1}
    plan = json.loads(plan_path.read_text(encoding="utf-8"))
    assert plan["actions"] == [
        {"type": "add", "element_name": "phoneInput", "element_type": "input", "locator": "getByLabel('Phone')"}
    ]


def test_descriptor_mode_flags_attribute_changes(tmp_path: Path) -> None:
    old = _snapshot(tmp_path / "old.json", _email(label="Email"))
    new = _snapshot(tmp_path / "new.json", _email(label="Work email"))

    assert cli.main(["diff", str(old), str(new)]) == cli.EXIT_OK
    assert cli.main(["diff", str(old), str(new), "--mode", "descriptor"]) == cli.EXIT_DRIFT


def test_corrupt_baseline_exits_one(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    broken = tmp_path / "old.json"
    broken.write_text("{", encoding="utf-8")
    new = _snapshot(tmp_path / "new.json", _email())

    assert cli.main(["diff", str(broken), str(new)]) == cli.EXIT_ERROR
    assert "Malformed JSON" in capsys.readouterr().err


def test_missing_snapshot_exits_one(tmp_path: Path) -> None:
    new = _snapshot(tmp_path / "new.json", _email())
    assert cli.main(["diff", str(tmp_path / "absent.json"), str(new)]) == cli.EXIT_ERROR


def test_usage_error_exits_one() -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["diff", "only-one.json"])
    assert exc_info.value.code == cli.EXIT_ERROR


def test_generate_writes_code_and_metadata(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(PageObjectGenerator, "generate_from_url", _fake_generate_from_url([_email()]))
    output = tmp_path / "pages" / "LoginPage.py"
    metadata_path = tmp_path / "login.json"

    exit_code = cli.main(
        ["generate", "https://example.com/login", "Login", "-o", str(output), "--json", str(metadata_path), "--language", "python"]
    )

    assert exit_code == cli.EXIT_OK
    assert 'self.emailInput = page.get_by_role("textbox", name="Email")' in output.read_text(encoding="utf-8")
    assert load_metadata(metadata_path).batch.identifiers() == ["emailInput"]
    assert f"Page object saved to: {output}" in capsys.readouterr().out


def test_generate_with_invalid_config_exits_one(tmp_path: Path) -> None:
    config_path = tmp_path / "pogen.json"
    config_path.write_text(json.dumps({"locator_priority": []}), encoding="utf-8")
    assert cli.main(["generate", "https://example.com", "Home", "--config", str(config_path)]) == cli.EXIT_ERROR


def test_check_updates_baseline_on_drift(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    baseline = _snapshot(tmp_path / "baseline.json", _email())
    phone = (ElementDescriptor(tag="input", placeholder="Phone"), SemanticCategory.INPUT)
    monkeypatch.setattr(PageObjectGenerator, "generate_from_url", _fake_generate_from_url([_email(), phone]))

    args = ["check", "https://example.com/login", "Login", "--baseline", str(baseline)]
    assert cli.main(args) == cli.EXIT_DRIFT
    assert load_metadata(baseline).batch.identifiers() == ["emailInput"]

    assert cli.main([*args, "--update"]) == cli.EXIT_DRIFT
    assert load_metadata(baseline).batch.identifiers() == ["emailInput", "phoneInput"]
    assert cli.main(args) == cli.EXIT_OK


def test_build_logger_writes_under_log_dir(tmp_path: Path) -> None:
    logger = cli.build_logger(log_dir=tmp_path / "logs")
    logger.info("hello")
    assert logger.name == "pogen"
    assert logger.handlers


class _ClosingSession:
    page = None

    def start(self) -> None:
        pass

    def navigate(self, url: str) -> str:
        return url

    def close(self) -> None:
        pass


def test_generate_exits_one_when_browser_closes_mid_discovery(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def discover(_page, extra_roles=()):
        raise Exception("Target page, context or browser has been closed")

    monkeypatch.setattr("pogen.generator.BrowserSession", _ClosingSession)
    monkeypatch.setattr("pogen.generator.discover_descriptors", discover)

    assert cli.main(["generate", "https://example.com", "Home"]) == cli.EXIT_ERROR
    assert "Element discovery failed on https://example.com" in capsys.readouterr().err
