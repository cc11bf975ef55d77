from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path


def _run(cmd: list[str], env: dict[str, str]) -> None:
    result = subprocess.run(
        cmd,
        check=False,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        env=env,
    )
    if result.returncode != 0:
        print(result.stdout)
        raise SystemExit(result.returncode)


def main() -> None:
    root = Path(__file__).resolve().parents[1]
    env = os.environ.copy()
    env["PYTHONPATH"] = str(root / "src")
    case_file = str(root / "case_files/price_list.yaml")
    output_dir = root / "output/smoke"

    _run([sys.executable, "-m", "tbl_ui_cli.cli", "--help"], env)
    _run([sys.executable, "-m", "tbl_ui_cli.cli", "validate", case_file], env)
    _run(
        [
            sys.executable,
            "-m",
            "tbl_ui_cli.cli",
            "render",
            "--input",
            case_file,
            "--output",
            str(output_dir / "price_list.html"),
            "--preview-css",
        ],
        env,
    )
    for suffix in ("xlsx", "csv"):
        _run(
            [
                sys.executable,
                "-m",
                "tbl_ui_cli.cli",
                "export",
                "--input",
                case_file,
                "--output",
                str(output_dir / f"price_list.{suffix}"),
            ],
            env,
        )


if __name__ == "__main__":
    main()
