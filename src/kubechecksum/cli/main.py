#!/usr/bin/env python3
"""
KUBECHECKSUM CLI
----------------
Reads a manifest stream (stdin or a file), injects checksum markers into
Deployment pod templates and writes the stream back (stdout or a file).
Human-facing output (errors, --diff, --summary) goes to stderr.
"""

import sys
import logging
import argparse
from typing import List, Optional

from kubechecksum.cli.formatter import KubeFormatter
from kubechecksum.core.engine import InjectionEngine
from kubechecksum.core.errors import InvalidModeError, KubeChecksumError
from kubechecksum.core.models import InjectionMode

VERSION = "1.0.0"

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


class KubeChecksumCLI:
    """
    CLI wrapper that translates flags into an InjectionEngine run.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="k8s-checksum-injector",
            description="Adds ConfigMap/Secret checksum labels or annotations to Deployment pod templates",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="Example: helm template . | k8s-checksum-injector --mode annotation | kubectl apply -f -"
        )
        self.formatter = KubeFormatter()
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("--version", action="version", version=f"k8s-checksum-injector v{VERSION}")
        # Checked by InjectionMode.parse; an unknown value exits 1
        self.parser.add_argument("--mode", default=InjectionMode.LABEL.value,
                                 help="inject checksums as 'label' or 'annotation' (default: label)")
        self.parser.add_argument("path", nargs="?", help="Manifest file to read (default: stdin)")
        self.parser.add_argument("-o", "--output", help="Write the result to this file instead of stdout")
        self.parser.add_argument("--diff", action="store_true", help="Show a diff of the changes on stderr")
        self.parser.add_argument("--summary", action="store_true", help="Show a per-Deployment report on stderr")
        self.parser.add_argument("-v", "--verbose", action="count", default=0,
                                 help="Increase log verbosity (-v info, -vv debug)")

    def _configure_logging(self, verbosity: int):
        level = LOG_LEVELS[min(verbosity, len(LOG_LEVELS) - 1)]
        logging.basicConfig(level=level, stream=sys.stderr,
                            format="%(levelname)s %(name)s: %(message)s")
        logging.getLogger("kubechecksum").setLevel(level)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Returns the process exit code."""
        args = self.parser.parse_args(argv)
        self._configure_logging(args.verbose)

        try:
            mode = InjectionMode.parse(args.mode)
        except InvalidModeError as e:
            self.formatter.print_error(str(e))
            return 1

        engine = InjectionEngine(mode)
        try:
            context = engine.run(input_path=args.path, output_path=args.output)
        except KubeChecksumError as e:
            self.formatter.print_error(str(e))
            return 1
        except (OSError, UnicodeDecodeError) as e:
            self.formatter.print_error(f"I/O failure: {e}")
            return 1

        if args.diff:
            self.formatter.display_diff(context.raw_text, context.output_text, args.path or "stdin")
        if args.summary:
            self.formatter.print_summary_table(context, engine.generate_summary(context))
        return 0


def main(argv: Optional[List[str]] = None):
    """Application entry point with interrupt handling."""
    try:
        sys.exit(KubeChecksumCLI().run(argv))
    except KeyboardInterrupt:
        KubeFormatter().print_error("Terminated by user.")
        sys.exit(1)


if __name__ == "__main__":
    main()
