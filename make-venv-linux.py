"""Create .venv on Linux, install ExamQt in editable mode, and open a shell in it."""

from __future__ import annotations

from pathlib import Path
import subprocess
import sys


def run_command(command: list[str]) -> None:
	subprocess.run(command, check=True)


def launch_shell_with_venv(venv_path: Path) -> None:
	activate_script = venv_path / "bin" / "activate"
	if not activate_script.exists():
		raise FileNotFoundError(f"Activation script not found at {activate_script}")

	print("Opening a shell with the ExamQt environment active. Run 'examqt' to start the portal.")
	bash_command = f"source '{activate_script}' && exec $SHELL"
	subprocess.run(["/bin/bash", "-c", bash_command], check=True)


def main() -> None:
	project_root = Path(__file__).resolve().parent
	venv_path = project_root / ".venv"

	if not venv_path.exists():
		print(f"Creating {venv_path} with {sys.executable}")
		run_command([sys.executable, "-m", "venv", str(venv_path)])

	venv_python = venv_path / "bin" / "python"
	run_command([str(venv_python), "-m", "pip", "install", "--upgrade", "pip"])
	extras = "[test]" if "--with-tests" in sys.argv[1:] else ""
	run_command([str(venv_python), "-m", "pip", "install", "-e", f"{project_root}{extras}"])

	launch_shell_with_venv(venv_path)


if __name__ == "__main__":
	main()
