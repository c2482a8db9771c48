from __future__ import annotations

import subprocess
import sys
from pathlib import Path

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "tools" / "depcheck.py"


def _run(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, str(SCRIPT_PATH), *args],
        capture_output=True,
        text=True,
        check=False,
    )


def test_depcheck_fails_on_forbidden_import(tmp_path: Path) -> None:
    domain_dir = tmp_path / "domain"
    domain_dir.mkdir(parents=True, exist_ok=True)

    violating_file = domain_dir / "model.py"
    violating_file.write_text("import sqlalchemy\n", encoding="utf-8")

    result = _run("--path", str(domain_dir), "--layer", "domain")

    combined_output = f"{result.stdout}\n{result.stderr}"
    assert result.returncode != 0
    assert "sqlalchemy" in combined_output
    assert str(violating_file) in combined_output


def test_application_layer_may_use_pydantic_but_not_storage(tmp_path: Path) -> None:
    app_dir = tmp_path / "application"
    app_dir.mkdir(parents=True, exist_ok=True)
    (app_dir / "dto.py").write_text("from pydantic import BaseModel\n", encoding="utf-8")
    (app_dir / "repo.py").write_text(
        "from rrs.infrastructure.db.session import get_engine\n", encoding="utf-8"
    )

    result = _run("--path", str(app_dir), "--layer", "application")

    assert result.returncode == 1
    assert "rrs.infrastructure.db.session" in result.stdout
    assert "dto.py" not in result.stdout


def test_source_tree_respects_layer_policies() -> None:
    result = _run()

    assert result.returncode == 0, result.stdout
    assert "depcheck passed" in result.stdout
