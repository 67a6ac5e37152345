from phone_lookup.cli_base import run_lookup


def main(argv: list[str] | None = None) -> int:
    return run_lookup(argv)


if __name__ == "__main__":
    raise SystemExit(main())
