from . import cli


def main() -> None:
    raise SystemExit(cli.main(console=True))


if __name__ == "__main__":
    main()
