import sys


def main():
    if len(sys.argv) > 1 or not sys.stdin.isatty():
        from scry.__main__ import main as scry_main

        scry_main()
    else:
        print("Usage: <command> | python main.py [scry options]")


if __name__ == "__main__":
    main()
