#!/usr/bin/env python3
"""
synvm CLI — run and assemble images for the synvm word machine
Commands: run · asm · exec · version
"""

import argparse
import logging
import sys
from pathlib import Path

from synvm import __version__

DEFAULT_IMAGE = "challenge.bin"

log = logging.getLogger("synvm")


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------

def _assemble_src(src_path: str) -> bytes:
    """Read an assembly source file, assemble and return image bytes."""
    from synvm.assembler import assemble, AssemblerError
    src = Path(src_path).read_text()
    try:
        return assemble(src)
    except (AssemblerError, SyntaxError) as e:
        print(f"❌ Assembly error: {e}", file=sys.stderr)
        sys.exit(1)


def _run_image(image: bytes) -> None:
    from synvm.errors import VMError
    from synvm.vm import VirtualMachine
    vm = VirtualMachine(stdin=sys.stdin, stdout=sys.stdout)
    try:
        vm.load(image)
        reason = vm.run()
    except VMError as e:
        sys.stdout.flush()
        print(f"\n❌ {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)
    log.info("Stopped (%s) after %d instructions", reason.value, vm.steps)


# ---------------------------------------------------------------------------
# sub-command handlers
# ---------------------------------------------------------------------------

def cmd_run(args):
    """synvm run [image.bin]"""
    try:
        image = Path(args.input).read_bytes()
    except OSError as e:
        print(f"❌ Cannot read image: {e}", file=sys.stderr)
        sys.exit(1)
    _run_image(image)


def cmd_assemble(args):
    """synvm asm program.asm [-o program.bin]"""
    image = _assemble_src(args.input)
    out = args.output or str(Path(args.input).with_suffix(".bin"))
    Path(out).write_bytes(image)
    print(f"✅ Assembled → {out}  ({len(image) // 2} words)")


def cmd_exec(args):
    """synvm exec program.asm  — assemble + run in one shot"""
    _run_image(_assemble_src(args.input))


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------

def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="synvm",
        description=(
            f"synvm v{__version__} — 16-bit word machine\n\n"
            "  run        Run a binary image\n"
            "  asm        Assemble source → binary image\n"
            "  exec       Assemble + run source in one shot\n"
            "  version    Show version info\n"
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"synvm {__version__}"
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging on stderr")

    sub = parser.add_subparsers(dest="cmd", required=True)

    # ── run ────────────────────────────────────────────────────────────────
    p_run = sub.add_parser("run", help="Run a binary image")
    p_run.add_argument("input", nargs="?", default=DEFAULT_IMAGE,
                       help=f"image file (default: {DEFAULT_IMAGE})")
    p_run.set_defaults(func=cmd_run)

    # ── asm ────────────────────────────────────────────────────────────────
    p_asm = sub.add_parser("asm", help="Assemble source → binary image")
    p_asm.add_argument("input", help="assembly source file")
    p_asm.add_argument("-o", "--output", help="Output image path")
    p_asm.set_defaults(func=cmd_assemble)

    # ── exec ───────────────────────────────────────────────────────────────
    p_exec = sub.add_parser("exec", help="Assemble + run source in one shot")
    p_exec.add_argument("input", help="assembly source file")
    p_exec.set_defaults(func=cmd_exec)

    # ── version ────────────────────────────────────────────────────────────
    p_ver = sub.add_parser("version", help="Show version info")
    p_ver.set_defaults(func=lambda _: print(f"synvm {__version__}"))

    # ── dispatch ───────────────────────────────────────────────────────────
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    args.func(args)


if __name__ == "__main__":
    main()
