"""
Command-line interface for lung_survival package.
"""

import sys
from pathlib import Path
from . import analysis


def main():
    """Main CLI entry point."""
    if len(sys.argv) > 1 and sys.argv[1] in ("-h", "--help"):
        print("Usage: lung-survival [output_dir] [input_csv]")
        print("\nWithout input_csv the NCCTG lung data bundled with lifelines is used.")
        print("\nExample:")
        print("  lung-survival results/ data/lung.csv")
        sys.exit(0)

    output_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else analysis.OUT_DIR
    input_csv = Path(sys.argv[2]) if len(sys.argv) > 2 else None

    try:
        results = analysis.run_analysis(output_dir=output_dir, csv_path=input_csv)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"\nWrote {len(results['plots'])} plots:")
    for path in results["plots"]:
        print(f"  {path}")
    print(f"Results saved to: {results['workbook']}")


if __name__ == "__main__":
    main()
