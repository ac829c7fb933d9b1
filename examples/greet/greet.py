import argparse
import sys
from pathlib import Path


def main() -> int:
    parser = argparse.ArgumentParser(prog="greet")
    parser.add_argument("name", nargs="?")
    parser.add_argument("--shout", action="store_true")
    parser.add_argument("--from-file")
    args = parser.parse_args()

    name = args.name
    if args.from_file:
        path = Path(args.from_file)
        if not path.exists():
            print(f"greet: no such file: {path}", file=sys.stderr)
            return 1
        name = path.read_text(encoding="utf-8").strip()
    if name is None:
        name = sys.stdin.read().strip()
    if not name:
        print("greet: a name is required", file=sys.stderr)
        return 1
    text = f"hello, {name}"
    print(text.upper() if args.shout else text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
