from pathlib import Path

from contractcheck.cli.main import main

if __name__ == "__main__":
    registry = Path(__file__).with_name("contracts.yaml")
    raise SystemExit(main(["run", "--registry", str(registry)]))
