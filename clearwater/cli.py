# clearwater/cli.py: terminal lookup: ZIP -> systems, PWSID -> report
import argparse
import json
import sys
from typing import TextIO

from clearwater.config import setup_logging
from clearwater.docx_report import generate_report
from clearwater.errors import InvalidInputError
from clearwater.service import WaterQualityService, looks_like_zip
from clearwater.tables import systems_frame


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="clearwater", description="Tap water quality lookup (EPA SDWIS)")
    p.add_argument("query", nargs="?", help="5-digit ZIP code or PWSID (e.g. 10001 or NY7003493)")
    p.add_argument("--json", action="store_true", help="print the report as JSON instead of writing .docx")
    p.add_argument("--out", help="Word report path (default <PWSID>_Water_Report.docx)")
    p.add_argument("--state", help="list the largest community water systems in a state (e.g. TX)")
    p.add_argument("--log-level", default=None)
    return p


def ask(prompt: str, out: TextIO) -> str:
    """input() that writes its prompt to ``out`` instead of stdout."""
    print(prompt, end="", file=out, flush=True)
    return input().strip()


def pick_system(service: WaterQualityService, zip_code: str, out: TextIO | None = None) -> str | None:
    out = out or sys.stdout
    systems = service.systems_for_zip(zip_code)
    if not systems:
        print("No water systems found for that ZIP code.", file=out)
        return None
    display = systems_frame(systems).reset_index().rename(columns={"index": "#"})
    print("\nMatches:", file=out)
    print(display.to_string(index=False), file=out)
    try:
        pick = int(ask("\nEnter the # of the system to use: ", out))
        if pick < 0:
            raise IndexError(pick)
        return systems[pick].pwsid
    except (ValueError, IndexError, EOFError):
        print("Invalid selection.", file=out)
        return None


def main(argv: list[str] | None = None, service: WaterQualityService | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    service = service or WaterQualityService()
    # with --json, stdout carries only the report
    out = sys.stderr if args.json else sys.stdout

    if args.state:
        try:
            systems = service.systems_for_state(args.state)
        except InvalidInputError as e:
            print(e.message)
            return 2
        if not systems:
            print(f"No water systems found for {args.state.upper()}.")
            return 1
        print(systems_frame(systems).to_string(index=False))
        return 0

    query = args.query
    if not query:
        print("ClearWater", file=out)
        print("  • Enter a ZIP code (e.g., 10001), OR", file=out)
        print("  • Enter a PWSID (e.g., NY7003493)", file=out)
        query = ask("\nSearch (ZIP or PWSID): ", out)

    try:
        if looks_like_zip(query):
            pwsid = pick_system(service, query, out)
            if pwsid is None:
                return 1
        else:
            pwsid = query
        report = service.report(pwsid)
    except InvalidInputError as e:
        print(e.message, file=out)
        return 2

    if args.json:
        json.dump(report.to_dict(service.grade(report)), sys.stdout, indent=2)
        print()
        return 0

    if report.system is None:
        print(f"No water system found with ID {report.pwsid}.")
        return 1
    grade = service.grade(report)
    print(f"\n{report.system.name}: grade {grade.letter} ({grade.label})")
    path = generate_report(report, args.out)
    print(f"Report saved: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
